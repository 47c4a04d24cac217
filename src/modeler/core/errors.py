"""
Structured error types for the modeler engine.

Every failure the engine reports carries a category, an optional context
(which kind, which attribute, which identifier) and an optional chained cause.
Lifecycle failures (validation, not-saved) are never raised out of ``save``
or ``destroy``; they are handed to the caller's callback and returned as an
``Err``.  Declaration mistakes (bad attribute names, duplicate primary keys)
are raised immediately because they are programming errors at setup time.

Manifesto:
    - **Typed hierarchy:** One class per failure the caller may branch on
    - **Rich context:** Errors say which kind/attribute/identifier was involved
    - **Pass-through:** Adapter failures reach the caller as the adapter raised them
    - **Serializable:** ``to_dict()`` for structured logs

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        ModelerError                          │
        │            (category, context, cause, to_dict)               │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ValidationFailure     NotSavedFailure      AdapterError     │
        │  (VALIDATION)          (LIFECYCLE)          (ADAPTER)        │
        │                        IdentifierImmutable       │           │
        │                                             NotFoundError    │
        │                                                              │
        │  SchemaError           ConfigError                           │
        │  (SCHEMA)              (CONFIG)                              │
        │       │                                                      │
        │  UnknownAttributeError                                       │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = ValidationFailure(errors=[])
    >>> err.message
    'validation failed'
    >>> NotSavedFailure().with_context(kind="Pet").context.kind
    'Pet'

Tags:
    error-handling, exception-hierarchy, error-context, modeler

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from modeler.model.validation import ValidationError


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing.

    - **VALIDATION:** validators reported at least one error
    - **LIFECYCLE:** an operation was attempted in the wrong state
    - **ADAPTER:** the persistence adapter failed
    - **SCHEMA:** the kind declaration was misused
    - **CONFIG:** settings or adapter lookup failed
    """

    VALIDATION = "VALIDATION"
    LIFECYCLE = "LIFECYCLE"
    ADAPTER = "ADAPTER"
    SCHEMA = "SCHEMA"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        kind: Name of the kind involved
        attr: Attribute name, for per-attribute failures
        identifier: Primary identifier of the instance, when it has one
        metadata: Additional key-value pairs
    """

    kind: str | None = None
    attr: str | None = None
    identifier: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Set fields plus metadata, flattened into one dict."""
        fields = {"kind": self.kind, "attr": self.attr, "identifier": self.identifier}
        return {**{k: v for k, v in fields.items() if v is not None}, **self.metadata}


class ModelerError(Exception):
    """
    Base class for every error the engine produces.

    Attributes:
        message: Human-readable message (also ``str(error)``)
        category: :class:`ErrorCategory` for routing
        context: :class:`ErrorContext` with kind/attr/identifier
        cause: Underlying exception, chained as ``__cause__``
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_message: str = "modeler error"

    def __init__(
        self,
        message: str | None = None,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        self.message = self.default_message if message is None else message
        super().__init__(self.message)
        self.category = category or self.default_category
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ModelerError:
        """Fill context fields; unknown keys go to ``context.metadata``.

        Returns the error itself so it can be built inline::

            return Err(NotSavedFailure().with_context(kind="Pet"))
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class ValidationFailure(ModelerError):
    """Validators reported errors during ``save``.

    The errors are the same objects left on ``instance.errors``.
    """

    default_category = ErrorCategory.VALIDATION
    default_message = "validation failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[ValidationError] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = [error.to_dict() for error in self.errors]
        return result


class NotSavedFailure(ModelerError):
    """``destroy`` was called on an instance that was never persisted."""

    default_category = ErrorCategory.LIFECYCLE
    default_message = "not saved"


class IdentifierImmutableError(ModelerError):
    """A persisted instance's identifier was reassigned."""

    default_category = ErrorCategory.LIFECYCLE
    default_message = "identifier cannot change once persisted"


# =============================================================================
# ADAPTER ERRORS
# =============================================================================


class AdapterError(ModelerError):
    """Base class adapters may raise; the engine passes any adapter error through."""

    default_category = ErrorCategory.ADAPTER
    default_message = "adapter error"


class NotFoundError(AdapterError):
    """No record exists for the requested identifier."""

    default_message = "not found"


# =============================================================================
# DECLARATION / CONFIG ERRORS
# =============================================================================


class SchemaError(ModelerError):
    """A kind declaration was misused."""

    default_category = ErrorCategory.SCHEMA
    default_message = "invalid schema"


class UnknownAttributeError(SchemaError, AttributeError):
    """An attribute was read or written that the kind does not declare."""

    def __init__(self, attr: str, kind: str | None = None):
        label = f"{kind}.{attr}" if kind else attr
        super().__init__(
            f"unknown attribute: {label}",
            context=ErrorContext(kind=kind, attr=attr),
        )


class ConfigError(ModelerError):
    """Settings or adapter lookup failed."""

    default_category = ErrorCategory.CONFIG
    default_message = "invalid configuration"


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Category for any exception; foreign exceptions are mapped by type."""
    if isinstance(error, ModelerError):
        return error.category
    if isinstance(error, (ConnectionError, OSError, LookupError)):
        return ErrorCategory.ADAPTER
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ModelerError",
    # Lifecycle
    "ValidationFailure",
    "NotSavedFailure",
    "IdentifierImmutableError",
    # Adapter
    "AdapterError",
    "NotFoundError",
    # Declaration / config
    "SchemaError",
    "UnknownAttributeError",
    "ConfigError",
    # Utilities
    "categorize_error",
]
