"""Format-before-compare: re-serialize JSON text with normalized layout."""

from __future__ import annotations

import json
from typing import Any, Optional

from .logging import get_logger
from .models import CompareSettings, FormatSettings
from .parser import MAX_JSON_SIZE, parse
from .result import Err, Ok, Result

logger = get_logger(__name__)


def sort_keys_recursive(value: Any) -> Any:
    """Return a copy of ``value`` with every object's keys in ascending order. Arrays keep their order."""
    if isinstance(value, dict):
        return {key: sort_keys_recursive(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [sort_keys_recursive(item) for item in value]
    return value


def canonicalize(
    text: str,
    format_settings: Optional[FormatSettings] = None,
    max_bytes: int = MAX_JSON_SIZE
) -> Result:
    """
    Parse JSON text and serialize it again with normalized layout.

    Args:
        text: Raw JSON text
        format_settings: Indentation (2, 4 or tab) and key sorting
        max_bytes: Maximum accepted UTF-8 byte length

    Returns:
        Ok(formatted text) or Err(ValidationError) with the parser's error types
    """
    settings = format_settings or FormatSettings()
    parsed = parse(text, max_bytes)
    if isinstance(parsed, Err):
        return parsed

    value = parsed.value
    if settings.sort_keys:
        value = sort_keys_recursive(value)

    return Ok(json.dumps(value, indent=settings.indent, ensure_ascii=False))


def prepare_for_compare(
    text: str,
    settings: CompareSettings,
    max_bytes: int = MAX_JSON_SIZE
) -> str:
    """
    Apply the format-before-compare pre-pass.

    When canonicalization fails the original text is returned unchanged so
    that the parse step reports the error.
    """
    if not settings.format_before_compare:
        return text

    result = canonicalize(text, settings.format_settings, max_bytes)
    if isinstance(result, Ok):
        return result.value

    logger.warning(
        "canonicalize_failed",
        error_type=result.error.type.value,
        error=result.error.message,
    )
    return text
