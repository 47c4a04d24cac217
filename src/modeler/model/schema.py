"""
Attribute schema for a kind.

A ``Schema`` is the ordered set of ``AttributeDeclaration`` records a kind
was declared with.  Declaration order is the order attributes appear in
``to_dict()`` output.  Type hints are advisory and never enforced.

Exactly one attribute is the primary identifier: the one declared with
``primary=True``, otherwise an attribute literally named ``id``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from modeler.core.errors import SchemaError

__all__ = [
    "MISSING",
    "DEFAULT_PRIMARY_KEY",
    "AttributeDeclaration",
    "Schema",
]

DEFAULT_PRIMARY_KEY = "id"


class _Missing:
    """Sentinel for "no value", distinct from ``None``."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict) -> _Missing:
        return self


MISSING: Any = _Missing()


@dataclass(frozen=True)
class AttributeDeclaration:
    """One declared attribute.

    Attributes:
        name: Attribute name, unique within the kind
        type: Advisory type hint (a type object or a string such as ``"number"``)
        default: Default value, or a zero-argument callable producing one;
            ``MISSING`` when the attribute has no default
        primary: Whether this is the primary identifier
    """

    name: str
    type: Any = None
    default: Any = MISSING
    primary: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def default_value(self) -> Any:
        """The default for a new instance (callables are invoked each time)."""
        if callable(self.default):
            return self.default()
        return self.default


class Schema:
    """Ordered mapping of attribute name to :class:`AttributeDeclaration`."""

    def __init__(self) -> None:
        self._attrs: dict[str, AttributeDeclaration] = {}

    def add(self, declaration: AttributeDeclaration) -> AttributeDeclaration:
        """Add *declaration*; redeclaring a name replaces it in place."""
        if declaration.primary:
            current = self.explicit_primary
            if current is not None and current.name != declaration.name:
                raise SchemaError(
                    f"{declaration.name!r} cannot be primary: {current.name!r} already is"
                ).with_context(attr=declaration.name)
        self._attrs[declaration.name] = declaration
        return declaration

    @property
    def explicit_primary(self) -> AttributeDeclaration | None:
        for declaration in self._attrs.values():
            if declaration.primary:
                return declaration
        return None

    @property
    def primary_key(self) -> str:
        """Name of the primary identifier attribute.

        Falls back to ``id`` even when no such attribute is declared; an
        instance of such a kind is then always new.
        """
        declaration = self.explicit_primary
        if declaration is not None:
            return declaration.name
        return DEFAULT_PRIMARY_KEY

    @property
    def names(self) -> list[str]:
        return list(self._attrs)

    def get(self, name: str) -> AttributeDeclaration | None:
        return self._attrs.get(name)

    def __getitem__(self, name: str) -> AttributeDeclaration:
        return self._attrs[name]

    def __contains__(self, name: object) -> bool:
        return name in self._attrs

    def __iter__(self) -> Iterator[AttributeDeclaration]:
        return iter(self._attrs.values())

    def __len__(self) -> int:
        return len(self._attrs)

    def __repr__(self) -> str:
        return f"Schema({self.names!r}, primary_key={self.primary_key!r})"
