"""
In-memory persistence adapter.

Manifesto:
    Test suites and single-process tools need an adapter that behaves like
    a real store (identifiers assigned on create, copies in and out, errors
    on unknown identifiers) without external infrastructure.

Records live in a dict keyed by identifier.  Identifiers are sequential
integers starting at 1.  Every call yields to the event loop once (or sleeps
``latency`` seconds) so callers never observe synchronous completion.

Tags:
    adapter, in-memory, asyncio, testing, single-node, modeler

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from collections.abc import Mapping
from typing import Any

from modeler.core.errors import NotFoundError
from modeler.core.logging import get_logger

__all__ = ["InMemoryAdapter"]

log = get_logger(__name__)


class InMemoryAdapter:
    """Dict-backed adapter satisfying :class:`~modeler.core.protocols.PersistenceAdapter`.

    Example::

        adapter = InMemoryAdapter()
        Pet = define_kind("Pet", adapter=adapter).attr("id").attr("name")

        pet = Pet(name="Tobi")
        await pet.save()
        assert await adapter.fetch(pet.id()) == {"name": "Tobi"}
    """

    def __init__(self, latency: float = 0.0) -> None:
        self._records: dict[Any, dict[str, Any]] = {}
        self._ids = itertools.count(1)
        self.latency = latency

    async def create(self, attributes: Mapping[str, Any]) -> Any:
        """Store *attributes* under a fresh identifier and return it."""
        await asyncio.sleep(self.latency)
        identifier = next(self._ids)
        self._records[identifier] = copy.deepcopy(dict(attributes))
        log.debug("memory_record_created", identifier=identifier)
        return identifier

    async def update(self, identifier: Any, attributes: Mapping[str, Any]) -> None:
        await asyncio.sleep(self.latency)
        if identifier not in self._records:
            raise NotFoundError(f"no record with identifier {identifier!r}").with_context(
                identifier=identifier
            )
        self._records[identifier] = copy.deepcopy(dict(attributes))
        log.debug("memory_record_updated", identifier=identifier)

    async def fetch(self, identifier: Any) -> dict[str, Any] | None:
        await asyncio.sleep(self.latency)
        record = self._records.get(identifier)
        if record is None:
            return None
        return copy.deepcopy(record)

    async def remove(self, identifier: Any) -> None:
        await asyncio.sleep(self.latency)
        if self._records.pop(identifier, None) is None:
            raise NotFoundError(f"no record with identifier {identifier!r}").with_context(
                identifier=identifier
            )
        log.debug("memory_record_removed", identifier=identifier)

    def clear(self) -> None:
        """Drop every stored record (identifiers keep counting)."""
        self._records.clear()

    def __contains__(self, identifier: Any) -> bool:
        return identifier in self._records

    def __len__(self) -> int:
        return len(self._records)
