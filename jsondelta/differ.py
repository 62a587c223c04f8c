"""Recursive structural diffing of two JSON values."""

from __future__ import annotations

import json
from typing import Any, Optional

from .models import CompareSettings, DiffEntry, DiffType, DEFAULT_COMPARE_SETTINGS
from .path import JsonPath
from .values import JsonKind, PRIMITIVE_KINDS, classify, is_number


class _Missing:
    """Marker for an object key that exists on one side only."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def _absent_or_null(value: Any) -> bool:
    return value is MISSING or value is None


def _key_segment(key_value: Any) -> str:
    """Path segment for a keyed array element."""
    if isinstance(key_value, str):
        return key_value
    return json.dumps(key_value, sort_keys=True)


def _key_identity(key_value: Any) -> str:
    # Distinguishes "1" from 1 while staying hashable for dict/list keys.
    return json.dumps(key_value, sort_keys=True)


class Differ:
    """
    Produces the ordered entry list for one comparison.

    Handles:
    - Null/undefined equivalence (treat_null_as_undefined)
    - Primitive comparison with optional float tolerance
    - Kind mismatches reported as a single modification
    - Array comparisons (ordered, unordered, keyed)

    A Differ accumulates entries for a single call of ``diff``; use
    ``compute_diff`` for a pure function interface.
    """

    def __init__(self, settings: Optional[CompareSettings] = None):
        self.settings = settings or DEFAULT_COMPARE_SETTINGS
        self.entries: list[DiffEntry] = []

    def diff(self, left: Any, right: Any, path: JsonPath = JsonPath()) -> list[DiffEntry]:
        """
        Compare two values depth-first, appending entries in traversal order.

        Args:
            left: The left/baseline value (or MISSING)
            right: The right value (or MISSING)
            path: Location of both values in their documents

        Returns:
            The accumulated entry list
        """
        settings = self.settings

        if settings.treat_null_as_undefined:
            if _absent_or_null(left) and _absent_or_null(right):
                self.entries.append(DiffEntry.unchanged(
                    path,
                    None if left is MISSING else left,
                    None if right is MISSING else right
                ))
                return self.entries

        if left is MISSING:
            self.entries.append(DiffEntry.added(path, right))
            return self.entries
        if right is MISSING:
            self.entries.append(DiffEntry.removed(path, left))
            return self.entries

        left_kind = classify(left)
        right_kind = classify(right)

        if left_kind in PRIMITIVE_KINDS and right_kind in PRIMITIVE_KINDS:
            self._diff_primitives(left, right, path)
        elif left_kind != right_kind:
            self.entries.append(DiffEntry.modified(path, left, right))
        elif left_kind == JsonKind.OBJECT:
            self._diff_objects(left, right, path)
        else:
            self._diff_arrays(left, right, path)

        return self.entries

    def _diff_primitives(self, left: Any, right: Any, path: JsonPath):
        if primitives_equal(left, right, self.settings):
            self.entries.append(DiffEntry.unchanged(path, left, right))
        else:
            self.entries.append(DiffEntry.modified(path, left, right))

    def _diff_objects(self, left: dict, right: dict, path: JsonPath):
        """Compare two objects key by key, left keys first."""
        if not left and not right:
            self.entries.append(DiffEntry.unchanged(path, left, right))
            return

        all_keys = list(left.keys())
        all_keys.extend(key for key in right.keys() if key not in left)

        for key in all_keys:
            self.diff(
                left.get(key, MISSING),
                right.get(key, MISSING),
                path.append(key)
            )

    def _diff_arrays(self, left: list, right: list, path: JsonPath):
        """Compare two arrays based on the array settings."""
        if not left and not right:
            self.entries.append(DiffEntry.unchanged(path, left, right))
        elif self.settings.uses_keyed_arrays:
            self._diff_keyed_arrays(left, right, path)
        elif self.settings.ignore_array_order:
            self._diff_unordered_arrays(
                list(enumerate(left)), list(enumerate(right)), path
            )
        else:
            self._diff_ordered_arrays(left, right, path)

    def _diff_ordered_arrays(self, left: list, right: list, path: JsonPath):
        """Compare arrays index-by-index (order matters)."""
        for i in range(max(len(left), len(right))):
            child_path = path.append(i)
            if i >= len(left):
                self.entries.append(DiffEntry.added(child_path, right[i]))
            elif i >= len(right):
                self.entries.append(DiffEntry.removed(child_path, left[i]))
            else:
                self.diff(left[i], right[i], child_path)

    def _diff_unordered_arrays(
        self,
        left: list[tuple[int, Any]],
        right: list[tuple[int, Any]],
        path: JsonPath
    ):
        """
        Greedy set-like comparison of (original index, item) pairs.

        Each left item consumes the first unmatched right item that is
        deep-equal to it. No backtracking, so the matching is not guaranteed
        to be globally optimal.
        """
        right_matched = [False] * len(right)

        for i, left_item in left:
            match = None
            for j, (_, right_item) in enumerate(right):
                if not right_matched[j] and values_equal(left_item, right_item, self.settings):
                    match = j
                    break

            if match is None:
                self.entries.append(DiffEntry.removed(path.append(i), left_item))
            else:
                right_matched[match] = True
                self.entries.append(DiffEntry.unchanged(
                    path.append(i), left_item, right[match][1]
                ))

        for matched, (j, right_item) in zip(right_matched, right):
            if not matched:
                self.entries.append(DiffEntry.added(path.append(j), right_item))

    def _diff_keyed_arrays(self, left: list, right: list, path: JsonPath):
        """Compare arrays by matching objects on the configured key field."""
        left_map, left_rest = self._index_by_key(left)
        right_map, right_rest = self._index_by_key(right)

        all_keys = list(left_map.keys())
        all_keys.extend(key for key in right_map.keys() if key not in left_map)

        for key in all_keys:
            if key not in right_map:
                i, item = left_map[key]
                self.entries.append(DiffEntry.removed(path.append(i), item))
            elif key not in left_map:
                j, item = right_map[key]
                self.entries.append(DiffEntry.added(path.append(j), item))
            else:
                left_item = left_map[key][1]
                segment = _key_segment(left_item[self.settings.key_field])
                self.diff(left_item, right_map[key][1], path.append(segment))

        if left_rest or right_rest:
            self._diff_unordered_arrays(left_rest, right_rest, path)

    def _index_by_key(self, items: list) -> tuple[dict, list]:
        """
        Split items into a key -> (index, item) map and a residual list.

        Items that are not objects, lack the key field, or repeat a key seen
        earlier go to the residual list with their original index.
        """
        key_field = self.settings.key_field
        indexed: dict = {}
        rest: list = []

        for i, item in enumerate(items):
            if isinstance(item, dict) and key_field in item:
                identity = _key_identity(item[key_field])
                if identity not in indexed:
                    indexed[identity] = (i, item)
                    continue
            rest.append((i, item))

        return indexed, rest


def primitives_equal(left: Any, right: Any, settings: CompareSettings) -> bool:
    """Compare two primitives; numbers honour the float tolerance."""
    if is_number(left) and is_number(right):
        if settings.float_tolerance is not None:
            try:
                return abs(left - right) <= settings.float_tolerance
            except OverflowError:
                # int beyond float range
                return False
        return left == right

    if classify(left) != classify(right):
        return False
    return left == right


def values_equal(left: Any, right: Any, settings: Optional[CompareSettings] = None) -> bool:
    """
    Deep equality under the comparison settings.

    Honours float tolerance and null/undefined equivalence (an object key
    holding null matches an absent key). Arrays are compared with the same
    ordering rules the differ uses.
    """
    settings = settings or DEFAULT_COMPARE_SETTINGS

    if settings.treat_null_as_undefined and _absent_or_null(left) and _absent_or_null(right):
        return True
    if left is MISSING or right is MISSING:
        return False

    left_kind = classify(left)
    right_kind = classify(right)

    if left_kind in PRIMITIVE_KINDS and right_kind in PRIMITIVE_KINDS:
        return primitives_equal(left, right, settings)
    if left_kind != right_kind:
        return False

    if left_kind == JsonKind.OBJECT:
        keys = list(left.keys())
        keys.extend(key for key in right.keys() if key not in left)
        return all(
            values_equal(left.get(key, MISSING), right.get(key, MISSING), settings)
            for key in keys
        )

    if len(left) != len(right):
        return False
    return all(
        entry.type == DiffType.UNCHANGED
        for entry in compute_diff(left, right, settings)
    )


def compute_diff(
    left: Any,
    right: Any,
    settings: Optional[CompareSettings] = None
) -> tuple[DiffEntry, ...]:
    """
    Compute the diff between two JSON values.

    Args:
        left: The left/baseline value
        right: The right value
        settings: Comparison settings (defaults if not provided)

    Returns:
        Entries in depth-first traversal order, Unchanged entries included
    """
    differ = Differ(settings)
    return tuple(differ.diff(left, right))
