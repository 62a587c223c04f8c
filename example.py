"""Example usage of the jsondelta diff engine."""

import json

from jsondelta import CompareSettings, DiffCache, DiffEngine, DiffType, Err, ExportFormat
from jsondelta.aggregator import without_unchanged

# Invoice as returned by the old service
old_invoice = json.dumps({
    "id": "INV-001",
    "total": 100.00,
    "status": "PAID",
    "note": None,
    "lineItems": [
        {"sku": "WIDGET-001", "quantity": 5, "unitPrice": 10.00},
        {"sku": "GADGET-002", "quantity": 2, "unitPrice": 25.50}
    ]
})

# Same invoice from the new service: items reordered, one quantity changed
new_invoice = json.dumps({
    "id": "INV-001",
    "total": 100.004,
    "status": "paid",
    "lineItems": [
        {"sku": "GADGET-002", "quantity": 3, "unitPrice": 25.50},
        {"sku": "WIDGET-001", "quantity": 5, "unitPrice": 10.00}
    ],
    "currency": "EUR"
})


def main():
    print("=" * 60)
    print("jsondelta - Example")
    print("=" * 60)

    engine = DiffEngine()
    outcome = engine.compare(old_invoice, new_invoice)

    if isinstance(outcome, Err):
        print(f"\nError: {outcome.error.type.value}")
        print(f"Message: {outcome.error.message}")
        return

    result = outcome.value.result
    stats = result.stats
    print(f"\nSummary:")
    print(f"  Added: {stats.added}")
    print(f"  Removed: {stats.removed}")
    print(f"  Modified: {stats.modified}")
    print(f"  Unchanged: {stats.unchanged}")

    print(f"\nDifferences:")
    for entry in without_unchanged(result).entries:
        print(f"  - [{entry.type.value}] {entry.path}")
        if entry.type != DiffType.ADDED:
            print(f"    Old: {entry.left_value}")
        if entry.type != DiffType.REMOVED:
            print(f"    New: {entry.right_value}")


def example_with_settings():
    """Keyed array matching, float tolerance and null/absent equivalence."""
    print("\n" + "=" * 60)
    print("Example with Comparison Settings")
    print("=" * 60)

    settings = CompareSettings(
        ignore_array_order=True,
        key_field="sku",
        float_tolerance=0.01,
        treat_null_as_undefined=True,
    )
    engine = DiffEngine(cache=DiffCache())
    outcome = engine.compare(old_invoice, new_invoice, settings)
    result = without_unchanged(outcome.value.result)

    for entry in result.entries:
        print(f"  - [{entry.type.value}] {entry.path}")

    print("\n" + "-" * 60)
    print("JSON Patch:")
    artifact = engine.export(result, ExportFormat.JSON_PATCH).value
    print(artifact.content)


if __name__ == "__main__":
    main()
    example_with_settings()
