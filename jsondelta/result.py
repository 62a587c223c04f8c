"""Success/failure values returned at every fallible boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .exceptions import UnwrapError

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful result carrying a value."""
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    """A failed result carrying an error value."""
    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]


def is_ok(result: Result) -> bool:
    return isinstance(result, Ok)


def is_err(result: Result) -> bool:
    return isinstance(result, Err)


def map_result(result: Result, fn: Callable[[Any], U]) -> Result:
    """Apply ``fn`` to the value of a successful result."""
    if isinstance(result, Ok):
        return Ok(fn(result.value))
    return result


def and_then(result: Result, fn: Callable[[Any], Result]) -> Result:
    """Chain a function that itself returns a result."""
    if isinstance(result, Ok):
        return fn(result.value)
    return result


def unwrap(result: Result) -> Any:
    """
    Return the value of a successful result.

    Raises:
        UnwrapError: if the result is an error
    """
    if isinstance(result, Ok):
        return result.value
    raise UnwrapError(result.error)


def unwrap_or(result: Result, default: Any) -> Any:
    if isinstance(result, Ok):
        return result.value
    return default
