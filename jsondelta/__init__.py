"""
jsondelta - Structural JSON Diff Engine

Compares two JSON documents and reports which paths were added, removed,
modified or left unchanged, under configurable equivalence rules (array
order insensitivity, key-based array matching, float tolerance and
null/undefined equivalence). Results export to JSON, Markdown, HTML and
RFC 6902 JSON Patch.
"""

from .engine import DiffEngine, compare
from .models import (
    CompareSettings,
    FormatSettings,
    EngineConfig,
    DiffEntry,
    DiffType,
    DiffStats,
    DiffResult,
    DiffMetadata,
    ExportFormat,
    ValidationError,
    ValidationErrorType,
    CompareError,
    CompareErrorType,
    ExportError,
)
from .path import JsonPath
from .result import Ok, Err
from .parser import parse, validate, load_document, MAX_JSON_SIZE
from .differ import compute_diff, values_equal
from .aggregator import (
    from_entries,
    has_changes,
    filter_by_type,
    filter_by_path,
)
from .formatter import format_diff
from .canonicalizer import canonicalize
from .cache import DiffCache

__version__ = "1.0.0"
__all__ = [
    # Engine
    "DiffEngine",
    "compare",
    "EngineConfig",
    "DiffCache",
    # Settings
    "CompareSettings",
    "FormatSettings",
    # Results
    "DiffEntry",
    "DiffType",
    "DiffStats",
    "DiffResult",
    "DiffMetadata",
    "JsonPath",
    "Ok",
    "Err",
    # Errors
    "ValidationError",
    "ValidationErrorType",
    "CompareError",
    "CompareErrorType",
    "ExportError",
    # Functions
    "parse",
    "validate",
    "load_document",
    "MAX_JSON_SIZE",
    "compute_diff",
    "values_equal",
    "from_entries",
    "has_changes",
    "filter_by_type",
    "filter_by_path",
    "format_diff",
    "ExportFormat",
    "canonicalize",
]
