"""
Result envelope for consistent success/failure handling.

``save``, ``destroy`` and ``Kind.get`` never raise for expected failures;
they return ``Ok(instance)`` or ``Err(error)`` so callers branch on the value
instead of wrapping every call in try/except.  The same error object is also
handed to the optional callback.

Manifesto:
    - **Explicit over Implicit:** No hidden exceptions that callers might miss
    - **Pass-through:** ``Err`` holds the original exception object, unchanged
    - **Composable:** ``map``/``flat_map`` keep callers inside the Result

Examples:
    >>> from modeler.core.result import Ok, Err
    >>> Ok(10).map(lambda x: x * 2).unwrap()
    20
    >>> Err(ValueError("oops")).unwrap_or(0)
    0

Usage::

    result = await pet.save()
    match result:
        case Ok(saved):
            print(saved.id())
        case Err(error):
            print(error.message)

Tags:
    result-pattern, error-handling, modeler

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, overload

from modeler.core.errors import ModelerError

T = TypeVar("T")
U = TypeVar("U")


def _describe(error: Exception) -> dict[str, Any]:
    if isinstance(error, ModelerError):
        return error.to_dict()
    return {"error_type": type(error).__name__, "message": str(error)}


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """The operation succeeded with ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> Exception:
        raise ValueError(f"unwrap_err() on a successful result: {self.value!r}")

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        value = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
        return {"ok": True, "value": value}

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """The operation failed; ``error`` is the exception as it was raised or built."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Re-raise the held exception."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> Exception:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return Err(f(self.error))

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": _describe(self.error)}

    def __bool__(self) -> bool:
        return False


Result = Ok[T] | Err[T]


async def try_result_async(f: Callable[..., Awaitable[T]], *args: Any) -> Result[T]:
    """Await ``f(*args)`` and capture its value or exception.

    The call itself happens inside the ``try`` so an adapter method that
    raises before returning an awaitable is captured too.  Exceptions are
    kept as-is, never wrapped.
    """
    try:
        return Ok(await f(*args))
    except Exception as e:
        return Err(e)


@overload
def from_optional(value: None, error: Exception) -> Err[T]: ...


@overload
def from_optional(value: T, error: Exception) -> Ok[T]: ...


def from_optional(value: T | None, error: Exception) -> Result[T]:
    """``Err(error)`` for ``None``, ``Ok(value)`` for anything else (falsy included)."""
    return Err(error) if value is None else Ok(value)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result_async",
    "from_optional",
]
