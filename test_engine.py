"""Tests for the diff engine, result cache and settings loading."""

import json

import pytest
from jsondelta import (
    CompareErrorType,
    CompareSettings,
    DiffCache,
    DiffEngine,
    EngineConfig,
    Err,
    ExportFormat,
    FormatSettings,
    Ok,
    ValidationErrorType,
    compare,
    compute_diff,
)
from jsondelta.exceptions import ConfigError
from jsondelta.settings import load_settings, merge_overrides, settings_from_mapping


class TestEngineCompare:
    """Test comparing JSON texts end to end."""

    def setup_method(self):
        self.engine = DiffEngine()

    def test_successful_comparison(self):
        """Test that a comparison returns documents and a result."""
        outcome = self.engine.compare('{"a": 1}', '{"a": 2}')
        assert isinstance(outcome, Ok)
        comparison = outcome.value
        assert comparison.left_document.id == "left"
        assert comparison.right_document.data == {"a": 2}
        assert comparison.result.stats.modified == 1
        assert comparison.result.metadata.left_document_id == "left"

    def test_left_parse_error(self):
        """Test that an invalid left document is attributed to the left side."""
        outcome = self.engine.compare("{", "{}")
        assert isinstance(outcome, Err)
        assert outcome.error.type == CompareErrorType.LEFT_PARSE_ERROR
        assert outcome.error.error.type == ValidationErrorType.PARSE

    def test_right_parse_error(self):
        """Test that an invalid right document is attributed to the right side."""
        outcome = self.engine.compare("{}", "")
        assert outcome.error.type == CompareErrorType.RIGHT_PARSE_ERROR
        assert outcome.error.error.type == ValidationErrorType.EMPTY

    def test_left_reported_first(self):
        """Test that the left side is checked before the right side."""
        outcome = self.engine.compare("", "")
        assert outcome.error.type == CompareErrorType.LEFT_PARSE_ERROR

    def test_configured_size_limit(self):
        """Test that the engine applies its configured byte ceiling."""
        engine = DiffEngine(EngineConfig(max_input_bytes=10))
        outcome = engine.compare('{"a": "long value"}', "{}")
        assert outcome.error.error.type == ValidationErrorType.TOO_LARGE
        assert outcome.error.error.details["max_size"] == 10

    def test_format_before_compare_keeps_errors(self):
        """Test that the pre-pass does not hide parse errors."""
        settings = CompareSettings(format_before_compare=True)
        outcome = self.engine.compare("{}", "[1,", settings)
        assert outcome.error.type == CompareErrorType.RIGHT_PARSE_ERROR

    def test_format_before_compare_same_result(self):
        """Test that canonicalization does not change what is different."""
        left, right = '{"b":1,"a":[1,2]}', '{"a":[1,3],"b":1}'
        plain = self.engine.compare(left, right).value.result
        settings = CompareSettings(
            format_before_compare=True,
            format_settings=FormatSettings(indent=4, sort_keys=True),
        )
        prepared = self.engine.compare(left, right, settings).value.result
        assert plain.stats.to_dict() == prepared.stats.to_dict()

    def test_too_deep_to_compare(self):
        """Test that recursion exhaustion is a processing error."""
        depth = 700
        text = "[" * depth + "]" * depth
        outcome = self.engine.compare(text, text)
        assert isinstance(outcome, Err)
        assert outcome.error.type == CompareErrorType.PROCESSING_ERROR

    def test_huge_integer_with_tolerance(self):
        """Test that a very large integer is compared, not raised on."""
        big = "1" + "0" * 400
        outcome = self.engine.compare(f'{{"n": {big}}}', '{"n": 1.5}', CompareSettings(float_tolerance=0.1))
        assert isinstance(outcome, Ok)
        assert outcome.value.result.stats.modified == 1

    def test_convenience_function(self):
        """Test the module-level compare helper."""
        outcome = compare("[1,2]", "[2,1]", CompareSettings(ignore_array_order=True))
        assert outcome.value.result.stats.changes == 0


class TestEngineExport:
    """Test export artifacts."""

    def setup_method(self):
        self.engine = DiffEngine()
        self.result = self.engine.compare('{"a": 1}', '{"b": 1}').value.result

    def test_default_export(self):
        """Test that the configured default format is used."""
        artifact = self.engine.export(self.result).value
        assert artifact.format == ExportFormat.JSON
        assert artifact.mime_type == "application/json"
        assert artifact.filename.startswith("diff-")
        assert artifact.filename.endswith(".json")
        assert json.loads(artifact.content)["stats"]["total"] == 2

    def test_named_export(self):
        """Test an explicit format and file name."""
        artifact = self.engine.export(self.result, "markdown", "report.md").value
        assert artifact.filename == "report.md"
        assert artifact.mime_type == "text/markdown"

    def test_json_patch_mime_type(self):
        """Test the JSON Patch media type."""
        artifact = self.engine.export(self.result, ExportFormat.JSON_PATCH).value
        assert artifact.mime_type == "application/json-patch+json"

    def test_unsupported_format(self):
        """Test that an unknown format is an error value."""
        outcome = self.engine.export(self.result, "pdf")
        assert isinstance(outcome, Err)
        assert outcome.error.format == "pdf"


class TestDiffCache:
    """Test the caller-owned result cache."""

    def setup_method(self):
        self.cache = DiffCache(max_size=2)
        self.engine = DiffEngine(cache=self.cache)

    def test_hit_on_repeat(self):
        """Test that a repeated comparison is served from the cache."""
        first = self.engine.compare('{"a": 1}', '{"a": 2}').value.result
        second = self.engine.compare('{"a":1}', '{"a":2}').value.result
        assert (self.cache.hits, self.cache.misses) == (1, 1)
        assert first.entries == second.entries
        assert first.id != second.id

    def test_key_order_is_part_of_key(self):
        """Test that reordered keys are not served entries in the earlier order."""
        self.engine.compare('{"a": 1, "b": 2}', '{"a": 1, "b": 3}')
        outcome = self.engine.compare('{"b": 2, "a": 1}', '{"b": 3, "a": 1}')
        entries = outcome.value.result.entries
        assert self.cache.misses == 2
        assert [e.path.segments for e in entries] == [("b",), ("a",)]
        assert entries == compute_diff({"b": 2, "a": 1}, {"b": 3, "a": 1})

    def test_settings_are_part_of_key(self):
        """Test that different settings never share cached entries."""
        self.engine.compare("[1,2]", "[2,1]")
        outcome = self.engine.compare("[1,2]", "[2,1]", CompareSettings(ignore_array_order=True))
        assert self.cache.misses == 2
        assert outcome.value.result.stats.changes == 0

    def test_lru_eviction(self):
        """Test that the least recently used comparison is evicted."""
        for text in ("1", "2", "3"):
            self.engine.compare(text, text)
        assert self.cache.curr_size == 2
        self.engine.compare("1", "1")
        assert self.cache.misses == 4

    def test_independent_instances(self):
        """Test that separate caches share nothing."""
        other = DiffCache()
        self.engine.compare("1", "2")
        DiffEngine(cache=other).compare("1", "2")
        assert other.misses == 1 and other.hits == 0

    def test_clear(self):
        """Test that clear empties the cache and counters."""
        self.engine.compare("1", "2")
        self.cache.clear()
        assert (self.cache.curr_size, self.cache.hits, self.cache.misses) == (0, 0, 0)

    def test_compute_called_once(self):
        """Test get_or_compute only computes on a miss."""
        calls = []

        def compute(left, right, settings):
            calls.append((left, right))
            return []

        self.cache.get_or_compute(1, 2, CompareSettings(), compute)
        self.cache.get_or_compute(1, 2, CompareSettings(), compute)
        assert calls == [(1, 2)]


class TestSettingsLoading:
    """Test settings files and overrides."""

    def test_load_yaml(self, tmp_path):
        """Test loading a YAML settings file."""
        path = tmp_path / "settings.yaml"
        path.write_text(
            "ignore_array_order: true\n"
            "key_field: id\n"
            "float_tolerance: 0.001\n"
            "format_settings:\n"
            "  indent: tab\n"
            "  sort_keys: true\n"
        )
        settings = load_settings(path)
        assert settings.uses_keyed_arrays
        assert settings.float_tolerance == 0.001
        assert settings.format_settings == FormatSettings(indent="\t", sort_keys=True)

    def test_load_json(self, tmp_path):
        """Test loading a JSON settings file with camelCase keys."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"treatNullAsUndefined": True}))
        assert load_settings(str(path)).treat_null_as_undefined

    def test_empty_file(self, tmp_path):
        """Test that an empty file gives default settings."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path) == CompareSettings()

    def test_missing_file(self, tmp_path):
        """Test that a missing file is a configuration error."""
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nope.yaml")

    def test_malformed_file(self, tmp_path):
        """Test that unparsable YAML is a configuration error."""
        path = tmp_path / "bad.yaml"
        path.write_text("key_field: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert exc_info.value.details["path"] == str(path)

    def test_not_a_mapping(self):
        """Test that a non-mapping document is rejected."""
        with pytest.raises(ConfigError):
            settings_from_mapping(["ignore_array_order"])

    def test_negative_tolerance(self):
        """Test that a negative tolerance is rejected."""
        with pytest.raises(ConfigError) as exc_info:
            settings_from_mapping({"float_tolerance": -1})
        assert exc_info.value.details == {"float_tolerance": -1}

    def test_non_numeric_tolerance(self):
        """Test that a non-numeric tolerance is rejected."""
        with pytest.raises(ConfigError):
            settings_from_mapping({"float_tolerance": "small"})

    def test_bad_indent(self):
        """Test that only 2, 4 or tab indentation is accepted."""
        with pytest.raises(ConfigError):
            settings_from_mapping({"format_settings": {"indent": 3}})

    def test_non_string_key_field(self):
        """Test that a non-string key field is rejected."""
        with pytest.raises(ConfigError):
            settings_from_mapping({"key_field": 5})

    def test_merge_overrides(self):
        """Test that non-None overrides replace base values."""
        base = CompareSettings(key_field="id", float_tolerance=0.1)
        merged = merge_overrides(
            base,
            ignore_array_order=True,
            key_field=None,
            float_tolerance=0.5,
            indent="\t",
            sort_keys=None,
        )
        assert merged.key_field == "id"
        assert merged.float_tolerance == 0.5
        assert merged.ignore_array_order
        assert merged.format_settings == FormatSettings(indent="\t", sort_keys=False)
