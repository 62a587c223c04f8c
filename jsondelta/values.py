"""JSON value model: kind classification and type predicates."""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

# Python's native JSON mapping. bool is a subclass of int but is never a number here.
JsonValue = Union[None, bool, int, float, str, list, dict]


class JsonKind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


PRIMITIVE_KINDS = frozenset({
    JsonKind.NULL,
    JsonKind.BOOLEAN,
    JsonKind.NUMBER,
    JsonKind.STRING,
})


def classify(value: Any) -> JsonKind:
    """
    Return the JSON kind of a value.

    Args:
        value: A value built from dict, list, str, int, float, bool and None

    Returns:
        The matching JsonKind
    """
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, (list, tuple)):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def is_number(value: Any) -> bool:
    """Check if a value is numeric (int or float, never bool)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_primitive(value: Any) -> bool:
    return classify(value) in PRIMITIVE_KINDS


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def type_name(value: Any) -> str:
    """Get a friendly type name for a value."""
    return classify(value).value
