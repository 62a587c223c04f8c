"""Data models for the jsondelta diff engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from .path import JsonPath


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class DiffType(Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ExportFormat(Enum):
    JSON = "json"
    MARKDOWN = "markdown"
    HTML = "html"
    JSON_PATCH = "json-patch"


class ValidationErrorType(Enum):
    PARSE = "parse"
    EMPTY = "empty"
    TOO_LARGE = "too-large"
    INVALID_STRUCTURE = "invalid-structure"


class CompareErrorType(Enum):
    LEFT_PARSE_ERROR = "LEFT_PARSE_ERROR"
    RIGHT_PARSE_ERROR = "RIGHT_PARSE_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"


INDENT_CHOICES = (2, 4, "\t")

# Accepted spellings when settings come from files or stored share records.
_SETTING_ALIASES = {
    "ignoreArrayOrder": "ignore_array_order",
    "keyField": "key_field",
    "floatTolerance": "float_tolerance",
    "treatNullAsUndefined": "treat_null_as_undefined",
    "formatBeforeCompare": "format_before_compare",
    "formatSettings": "format_settings",
    "sortKeys": "sort_keys",
}


def _snake_keys(data: dict) -> dict:
    return {_SETTING_ALIASES.get(k, k): v for k, v in data.items()}


@dataclass(frozen=True)
class FormatSettings:
    """Indentation and key ordering used when canonicalizing JSON text."""
    indent: Union[int, str] = 2
    sort_keys: bool = False

    def to_dict(self) -> dict:
        return {"indent": self.indent, "sort_keys": self.sort_keys}

    @classmethod
    def from_dict(cls, data: dict) -> FormatSettings:
        data = _snake_keys(data)
        indent = data.get("indent", 2)
        if indent == "tab":
            indent = "\t"
        return cls(indent=indent, sort_keys=bool(data.get("sort_keys", False)))


@dataclass(frozen=True)
class CompareSettings:
    """Equivalence rules applied during a comparison. Never mutated mid-diff."""
    ignore_array_order: bool = False
    key_field: Optional[str] = None
    float_tolerance: Optional[float] = None
    treat_null_as_undefined: bool = False
    format_before_compare: bool = False
    format_settings: FormatSettings = field(default_factory=FormatSettings)

    @property
    def uses_keyed_arrays(self) -> bool:
        return self.ignore_array_order and bool(self.key_field)

    def to_dict(self) -> dict:
        return {
            "ignore_array_order": self.ignore_array_order,
            "key_field": self.key_field,
            "float_tolerance": self.float_tolerance,
            "treat_null_as_undefined": self.treat_null_as_undefined,
            "format_before_compare": self.format_before_compare,
            "format_settings": self.format_settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> CompareSettings:
        """Build settings from snake_case or camelCase keys; unknown keys are ignored."""
        data = _snake_keys(data)
        format_settings = data.get("format_settings") or {}
        if not isinstance(format_settings, FormatSettings):
            format_settings = FormatSettings.from_dict(format_settings)
        return cls(
            ignore_array_order=bool(data.get("ignore_array_order", False)),
            key_field=data.get("key_field") or None,
            float_tolerance=data.get("float_tolerance"),
            treat_null_as_undefined=bool(data.get("treat_null_as_undefined", False)),
            format_before_compare=bool(data.get("format_before_compare", False)),
            format_settings=format_settings,
        )


DEFAULT_COMPARE_SETTINGS = CompareSettings()


@dataclass(frozen=True)
class EngineConfig:
    """Global configuration for the diff engine."""
    max_input_bytes: int = 10 * 1024 * 1024
    log_level: LogLevel = LogLevel.INFO
    default_export: ExportFormat = ExportFormat.JSON


@dataclass(frozen=True)
class DiffEntry:
    """
    A single reported difference.

    Added entries carry only ``right_value``, Removed entries only
    ``left_value``; Modified and Unchanged carry both. Use the constructors
    below rather than building entries directly.
    """
    type: DiffType
    path: JsonPath
    left_value: Any = None
    right_value: Any = None

    @classmethod
    def added(cls, path: JsonPath, value: Any) -> DiffEntry:
        return cls(DiffType.ADDED, path, right_value=value)

    @classmethod
    def removed(cls, path: JsonPath, value: Any) -> DiffEntry:
        return cls(DiffType.REMOVED, path, left_value=value)

    @classmethod
    def modified(cls, path: JsonPath, left: Any, right: Any) -> DiffEntry:
        return cls(DiffType.MODIFIED, path, left, right)

    @classmethod
    def unchanged(cls, path: JsonPath, left: Any, right: Any) -> DiffEntry:
        return cls(DiffType.UNCHANGED, path, left, right)

    @property
    def has_left(self) -> bool:
        return self.type != DiffType.ADDED

    @property
    def has_right(self) -> bool:
        return self.type != DiffType.REMOVED

    def to_dict(self) -> dict:
        result = {
            "type": self.type.value,
            "path": list(self.path.segments),
        }
        if self.has_left:
            result["left_value"] = self.left_value
        if self.has_right:
            result["right_value"] = self.right_value
        return result


@dataclass(frozen=True)
class DiffStats:
    """Per-type entry counts; ``total`` always equals their sum."""
    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0
    total: int = 0

    def __post_init__(self):
        expected = self.added + self.removed + self.modified + self.unchanged
        if self.total != expected:
            raise ValueError(
                f"Inconsistent stats: total={self.total}, sum of counts={expected}"
            )

    @classmethod
    def from_entries(cls, entries) -> DiffStats:
        counts = {diff_type: 0 for diff_type in DiffType}
        for entry in entries:
            counts[entry.type] += 1
        return cls(
            added=counts[DiffType.ADDED],
            removed=counts[DiffType.REMOVED],
            modified=counts[DiffType.MODIFIED],
            unchanged=counts[DiffType.UNCHANGED],
            total=sum(counts.values()),
        )

    @property
    def changes(self) -> int:
        return self.added + self.removed + self.modified

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "removed": self.removed,
            "modified": self.modified,
            "unchanged": self.unchanged,
            "total": self.total,
        }


@dataclass(frozen=True)
class DiffMetadata:
    """Provenance of a diff result."""
    left_document_id: str
    right_document_id: str
    created_at: datetime
    settings: CompareSettings

    def to_dict(self) -> dict:
        return {
            "left_document_id": self.left_document_id,
            "right_document_id": self.right_document_id,
            "created_at": self.created_at.isoformat().replace("+00:00", "Z"),
            "settings": self.settings.to_dict(),
        }


@dataclass(frozen=True)
class DiffResult:
    """Complete comparison result. Built by ``aggregator.from_entries``."""
    id: str
    entries: tuple
    stats: DiffStats
    metadata: DiffMetadata

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entries": [e.to_dict() for e in self.entries],
            "stats": self.stats.to_dict(),
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class JsonDocument:
    """A parsed input document."""
    id: str
    data: Any
    created_at: datetime
    size: int


@dataclass(frozen=True)
class ValidationError:
    """Why a JSON input was rejected. A value, not an exception."""
    type: ValidationErrorType
    message: str
    details: Optional[dict] = None

    @classmethod
    def parse(cls, message: str, details: dict = None) -> ValidationError:
        return cls(ValidationErrorType.PARSE, message, details)

    @classmethod
    def empty(cls) -> ValidationError:
        return cls(ValidationErrorType.EMPTY, "Input is empty")

    @classmethod
    def too_large(cls, max_size: int, actual_size: int) -> ValidationError:
        return cls(
            ValidationErrorType.TOO_LARGE,
            f"Input is too large. Maximum size is {max_size} bytes, "
            f"but got {actual_size} bytes",
            {"max_size": max_size, "actual_size": actual_size},
        )

    @classmethod
    def invalid_structure(cls, message: str, details: dict = None) -> ValidationError:
        return cls(ValidationErrorType.INVALID_STRUCTURE, message, details)

    def to_dict(self) -> dict:
        result = {"type": self.type.value, "message": self.message}
        if self.details is not None:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"ValidationError [{self.type.value}]: {self.message}"


@dataclass(frozen=True)
class ExportError:
    """Returned when an export target is not supported."""
    type: str
    message: str
    format: Optional[str] = None

    @classmethod
    def unsupported_format(cls, fmt: Any) -> ExportError:
        return cls("unsupported-format", f"Unsupported format: {fmt}", str(fmt))

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "format": self.format}


@dataclass(frozen=True)
class CompareError:
    """Why a two-document comparison could not be produced."""
    type: CompareErrorType
    message: str
    error: Optional[ValidationError] = None

    def to_dict(self) -> dict:
        result = {"type": self.type.value, "message": self.message}
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


@dataclass(frozen=True)
class Comparison:
    """Output of comparing two JSON texts."""
    left_document: JsonDocument
    right_document: JsonDocument
    result: DiffResult


@dataclass(frozen=True)
class ExportArtifact:
    """Formatted diff plus the delivery details a collaborator needs."""
    content: str
    filename: str
    mime_type: str
    format: ExportFormat
