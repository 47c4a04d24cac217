"""
Validation pipeline.

Validators are plain callables registered on a kind with
``Kind.validate(fn)``.  Each is called as ``fn(instance, report)`` and
reports problems through ``report(attr, message)``; return values are
ignored.  Every validator runs on every pass, in registration order, so a
single failed save shows all of its errors at once.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from modeler.model.instance import Instance

__all__ = [
    "ValidationError",
    "Reporter",
    "Validator",
    "run_validators",
]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One problem reported by a validator."""

    attr: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        return f"{self.attr}: {self.message}"


Reporter = Callable[[str, str], None]
Validator = Callable[["Instance", Reporter], Any]


def run_validators(instance: Instance, validators: Iterable[Validator]) -> list[ValidationError]:
    """Clear ``instance.errors`` and refill it from *validators*.

    Exceptions raised by a validator propagate; they are bugs, not
    validation results.

    Returns:
        The instance's (new) error list
    """
    errors: list[ValidationError] = instance.errors
    errors.clear()

    def report(attr: str, message: str) -> None:
        errors.append(ValidationError(attr, message))

    for validator in validators:
        validator(instance, report)
    return errors
