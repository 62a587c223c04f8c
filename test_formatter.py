"""Tests for result aggregation and export formats."""

import json

from jsondelta import (
    CompareSettings,
    DiffType,
    Err,
    ExportFormat,
    JsonPath,
    compute_diff,
    filter_by_path,
    filter_by_type,
    format_diff,
    from_entries,
    has_changes,
)
from jsondelta.aggregator import entries_of_type, without_unchanged
from jsondelta.formatter import to_json_patch


def _result(left, right, settings=None):
    return from_entries(compute_diff(left, right, settings), "left", "right", settings)


class TestAggregator:
    """Test building and filtering diff results."""

    def setup_method(self):
        self.result = _result(
            {"a": 1, "b": {"c": 1, "d": 2}, "e": [1]},
            {"a": 2, "b": {"c": 1}, "f": True, "e": [1]},
        )

    def test_stats_match_entries(self):
        """Test that stats are derived from the entry list."""
        stats = self.result.stats
        assert (stats.added, stats.removed, stats.modified, stats.unchanged) == (1, 1, 1, 2)
        assert stats.total == len(self.result.entries)

    def test_metadata(self):
        """Test document ids and settings in the metadata."""
        metadata = self.result.metadata
        assert metadata.left_document_id == "left"
        assert metadata.right_document_id == "right"
        assert metadata.settings == CompareSettings()
        assert metadata.created_at.tzinfo is not None

    def test_result_id(self):
        """Test explicit and generated result ids."""
        assert from_entries([], "l", "r", result_id="fixed").id == "fixed"
        assert self.result.id != _result(1, 1).id

    def test_has_changes(self):
        """Test change detection."""
        assert has_changes(self.result)
        assert not has_changes(_result({"a": [1]}, {"a": [1]}))

    def test_filter_by_type(self):
        """Test that filtering recomputes stats."""
        filtered = filter_by_type(self.result, DiffType.ADDED, DiffType.REMOVED)
        assert [e.type for e in filtered.entries] == [DiffType.REMOVED, DiffType.ADDED]
        assert filtered.stats.total == 2
        assert filtered.stats.unchanged == 0
        assert filtered.id == self.result.id

    def test_filter_by_path(self):
        """Test keeping only entries at or under a path."""
        filtered = filter_by_path(self.result, JsonPath.of("b"))
        assert [e.path.segments for e in filtered.entries] == [("b", "c"), ("b", "d")]

    def test_without_unchanged(self):
        """Test dropping unchanged entries."""
        filtered = without_unchanged(self.result)
        assert not entries_of_type(filtered, DiffType.UNCHANGED)
        assert filtered.stats.changes == self.result.stats.changes

    def test_original_untouched(self):
        """Test that filtering returns a new result."""
        total = self.result.stats.total
        filter_by_type(self.result, DiffType.ADDED)
        assert self.result.stats.total == total


class TestJsonExport:
    """Test JSON export."""

    def test_json_round_trip(self):
        """Test that JSON output parses and mirrors the result."""
        result = _result({"a": 1}, {"a": 2, "b": [1]})
        data = json.loads(format_diff(result, ExportFormat.JSON).value)
        assert data["id"] == result.id
        assert data["stats"]["total"] == 2
        assert data["entries"][0] == {
            "type": "modified", "path": ["a"], "left_value": 1, "right_value": 2
        }
        assert data["entries"][1] == {"type": "added", "path": ["b"], "right_value": [1]}
        assert data["metadata"]["created_at"].endswith("Z")
        assert data["metadata"]["settings"]["ignore_array_order"] is False

    def test_string_format_name(self):
        """Test that string format names are accepted."""
        result = _result(1, 1)
        assert format_diff(result, "json") == format_diff(result, ExportFormat.JSON)

    def test_unsupported_format(self):
        """Test that an unknown format is an error value."""
        outcome = format_diff(_result(1, 2), "yaml")
        assert isinstance(outcome, Err)
        assert outcome.error.type == "unsupported-format"
        assert outcome.error.format == "yaml"


class TestMarkdownExport:
    """Test Markdown export."""

    def test_report_layout(self):
        """Test headings, statistics and change sections."""
        result = _result({"a": 1, "gone": "x", "same": 0}, {"a": 2, "b": {"c": 1}, "same": 0})
        output = format_diff(result, ExportFormat.MARKDOWN).value
        assert output.startswith("# JSON Diff Report")
        assert "- **Added**: 1" in output
        assert "- **Unchanged**: 1" in output
        assert "- **Total**: 4" in output
        assert "### ➕ Added: `$.b`" in output
        assert "### ➖ Removed: `$.gone`" in output
        assert "### ✏️ Modified: `$.a`" in output
        assert "**Before:**\n```json\n1\n```" in output
        assert "**After:**\n```json\n2\n```" in output
        assert "`$.same`" not in output

    def test_fence_outgrows_backticks_in_values(self):
        """Test that a value holding a backtick fence cannot close its block."""
        result = _result({"a": "x"}, {"a": "```\n# injected\n```"})
        output = format_diff(result, ExportFormat.MARKDOWN).value
        assert "**After:**\n````json\n\"```\\n# injected\\n```\"\n````" in output
        assert "**Before:**\n```json\n\"x\"\n```" in output

    def test_pretty_values(self):
        """Test that values are pretty-printed."""
        output = format_diff(_result({}, {"b": {"c": 1}}), "markdown").value
        assert '```json\n{\n  "c": 1\n}\n```' in output


class TestHtmlExport:
    """Test HTML export."""

    def test_document_structure(self):
        """Test a standalone HTML document with change blocks."""
        result = _result({"a": 1}, {"a": 2, "b": 3})
        output = format_diff(result, ExportFormat.HTML).value
        assert output.startswith("<!DOCTYPE html>")
        assert output.endswith("</html>")
        assert '<div class="change modified">' in output
        assert '<div class="change added">' in output
        assert "Added: <strong>1</strong>" in output

    def test_escapes_values_and_paths(self):
        """Test that markup in keys and values is escaped."""
        result = _result({}, {"<b>": "<script>alert(1)</script>"})
        output = format_diff(result, ExportFormat.HTML).value
        assert "<script>" not in output
        assert "&lt;script&gt;" in output
        assert "&lt;b&gt;" in output


class TestJsonPatchExport:
    """Test RFC 6902 JSON Patch export."""

    def test_operations(self):
        """Test add, remove and replace operations; unchanged is skipped."""
        result = _result({"a": 1, "b": 2, "k": 0}, {"a": 3, "c": [1], "k": 0})
        assert to_json_patch(result) == [
            {"op": "replace", "path": "/a", "value": 3},
            {"op": "remove", "path": "/b"},
            {"op": "add", "path": "/c", "value": [1]},
        ]

    def test_pointer_escaping(self):
        """Test that keys are escaped as JSON Pointer tokens."""
        result = _result({"a/b": 1, "m~n": 1}, {"a/b": 2})
        assert to_json_patch(result) == [
            {"op": "replace", "path": "/a~1b", "value": 2},
            {"op": "remove", "path": "/m~0n"},
        ]

    def test_root_replace(self):
        """Test that a root modification targets the empty pointer."""
        assert to_json_patch(_result(1, 2)) == [{"op": "replace", "path": "", "value": 2}]

    def test_array_indices(self):
        """Test that array operations use left-document indices."""
        result = _result([1, 2, 3], [1])
        assert to_json_patch(result) == [
            {"op": "remove", "path": "/1"},
            {"op": "remove", "path": "/2"},
        ]

    def test_serialized_patch(self):
        """Test the serialized patch is a JSON array."""
        output = format_diff(_result({}, {"a": None}), ExportFormat.JSON_PATCH).value
        assert json.loads(output) == [{"op": "add", "path": "/a", "value": None}]
