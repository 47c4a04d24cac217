"""
Protocol definitions for the persistence boundary.

The engine never talks to storage directly.  ``Kind`` and ``Instance`` call
an injected object that satisfies :class:`PersistenceAdapter`; any class
with these four coroutine methods works, no inheritance needed.

Manifesto:
    - **Structural typing:** Adapters match by shape (``typing.Protocol``)
    - **Opaque failures:** Whatever an adapter raises reaches the caller as-is
    - **Always surfaces outcome:** Adapters raise on failure, they never swallow

Architecture:
    ::

        Instance.save() ──> create(attributes)          -> record | identifier
                       └──> update(identifier, attributes) -> None
        Kind.get()     ──> fetch(identifier)             -> attributes | None
        Instance.destroy() > remove(identifier)          -> None

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols minimal and focused

    ❌ DON'T: Return an error value from an adapter method
    ✅ DO: Raise; the engine turns it into ``Err(error)``

Tags:
    protocol, adapter, persistence, structural-typing, modeler

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Async create/update/fetch/remove-by-identifier storage capability.

    ``create`` returns either a mapping that carries the primary key or the
    bare identifier.  ``fetch`` returns the stored attributes, or ``None``
    when nothing is stored under *identifier*.
    """

    async def create(self, attributes: Mapping[str, Any]) -> Any:
        """Store a new record and return it (or its identifier)."""
        ...

    async def update(self, identifier: Any, attributes: Mapping[str, Any]) -> None:
        """Replace the stored attributes of an existing record."""
        ...

    async def fetch(self, identifier: Any) -> Mapping[str, Any] | None:
        """Return the stored attributes, or ``None`` if absent."""
        ...

    async def remove(self, identifier: Any) -> None:
        """Delete the stored record."""
        ...


__all__ = [
    "PersistenceAdapter",
]
