"""Parsing and validation of raw JSON text."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError

from .models import JsonDocument, ValidationError
from .result import Err, Ok, Result

# Maximum size for JSON input (10 MiB)
MAX_JSON_SIZE = 10 * 1024 * 1024


def _reject_constant(name: str) -> Any:
    # Python's decoder accepts NaN/Infinity by default; JSON does not.
    raise ValueError(f"Invalid JSON constant: {name}")


def _byte_size(text: str) -> int:
    return len(text.encode("utf-8"))


def _check_input(text: str, max_bytes: int) -> Optional[ValidationError]:
    if not text or not text.strip():
        return ValidationError.empty()

    size = _byte_size(text)
    if size > max_bytes:
        return ValidationError.too_large(max_bytes, size)

    return None


def _decode(text: str) -> Result:
    try:
        return Ok(json.loads(text, parse_constant=_reject_constant))
    except json.JSONDecodeError as e:
        return Err(ValidationError.parse(
            e.msg,
            {"line": e.lineno, "column": e.colno, "position": e.pos}
        ))
    except ValueError as e:
        return Err(ValidationError.parse(str(e)))
    except RecursionError:
        return Err(ValidationError.invalid_structure(
            "JSON nesting is too deep to process"
        ))


def parse(text: str, max_bytes: int = MAX_JSON_SIZE) -> Result:
    """
    Parse JSON text into a value.

    Checks run in order: blank input, byte size ceiling, then syntax.

    Args:
        text: Raw JSON text
        max_bytes: Maximum accepted UTF-8 byte length

    Returns:
        Ok(value) or Err(ValidationError)
    """
    error = _check_input(text, max_bytes)
    if error is not None:
        return Err(error)
    return _decode(text)


def validate(text: str, max_bytes: int = MAX_JSON_SIZE) -> Result:
    """Run the same checks as ``parse`` and return Ok(None) on success."""
    result = parse(text, max_bytes)
    if isinstance(result, Err):
        return result
    return Ok(None)


def load_document(
    text: str,
    document_id: Optional[str] = None,
    max_bytes: int = MAX_JSON_SIZE
) -> Result:
    """
    Parse text into a JsonDocument.

    Args:
        text: Raw JSON text
        document_id: Identifier to use; a UUID4 is generated if omitted
        max_bytes: Maximum accepted UTF-8 byte length

    Returns:
        Ok(JsonDocument) or Err(ValidationError)
    """
    result = parse(text, max_bytes)
    if isinstance(result, Err):
        return result

    return Ok(JsonDocument(
        id=document_id or str(uuid.uuid4()),
        data=result.value,
        created_at=datetime.now(timezone.utc),
        size=_byte_size(text),
    ))


def stringify(value: Any, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(value, indent=2, ensure_ascii=False)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def select(value: Any, expression: str) -> Result:
    """
    Narrow a value to the first match of a JSONPath expression.

    Args:
        value: Parsed JSON value
        expression: JSONPath such as ``$.data.items``

    Returns:
        Ok(matched value) or Err(ValidationError) of type invalid-structure
    """
    try:
        expr = jsonpath_parse(expression)
    except (JsonPathParserError, JsonPathLexerError) as e:
        return Err(ValidationError.invalid_structure(
            f"Invalid JSONPath expression '{expression}': {e}",
            {"expression": expression}
        ))

    matches = expr.find(value)
    if not matches:
        return Err(ValidationError.invalid_structure(
            f"JSONPath expression '{expression}' matched nothing",
            {"expression": expression}
        ))

    return Ok(matches[0].value)
