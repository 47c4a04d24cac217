"""
Entity instances.

An ``Instance`` holds one value of a kind: the current attribute values,
the dirty map (attributes changed since construction, hydration or the last
successful save, paired with their value at that boundary), the error list
from the last validation pass, and the ``destroyed`` flag.

Accessors are generated from the schema at lookup time: for a kind with a
``name`` attribute, ``pet.name()`` reads and ``pet.name("Luna")`` writes and
returns the instance, exactly like ``pet.get("name")`` / ``pet.set(name=...)``.

Absent attributes (never set, no default) are not stored at all.  They
read as ``None``, ``has()`` is False for them and ``to_dict()`` omits them.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from modeler.core.errors import IdentifierImmutableError, UnknownAttributeError
from modeler.core.events import EventEmitter, Listener
from modeler.core.result import Result
from modeler.core.settings import get_settings
from modeler.model import lifecycle
from modeler.model.schema import MISSING
from modeler.model.validation import ValidationError, run_validators

if TYPE_CHECKING:
    from modeler.model.kind import Kind

__all__ = ["Instance"]


def _same(old: Any, new: Any) -> bool:
    if old is MISSING:
        return new is MISSING
    if old is new:
        return True
    try:
        return bool(old == new)
    except Exception:
        return False


def _visible(value: Any) -> Any:
    return None if value is MISSING else value


class Instance:
    """One value of a :class:`~modeler.model.kind.Kind`.

    Build instances by calling the kind, not this class::

        pet = Pet({"name": "Tobi"})
        pet = Pet(name="Tobi")
    """

    def __init__(self, kind: Kind, bag: Mapping[str, Any] | None = None) -> None:
        self._kind = kind
        self._attrs: dict[str, Any] = {}
        self._dirty: dict[str, Any] = {}
        self._events = EventEmitter()
        self._lock: asyncio.Lock | None = None
        self.errors: list[ValidationError] = []
        self.destroyed = False

        raw = dict(bag or {})
        schema = kind.schema
        for declaration in schema:
            if declaration.name in raw:
                self._attrs[declaration.name] = raw[declaration.name]
                self._dirty[declaration.name] = MISSING
            elif declaration.has_default:
                self._attrs[declaration.name] = declaration.default_value()

        # data loaded from storage starts clean
        self._persisted = self._attrs.get(schema.primary_key) is not None
        if self._persisted:
            self._dirty.clear()

        kind.events.emit("construct", self, raw)

    # -- Kind reference ----------------------------------------------------

    @property
    def kind(self) -> Kind:
        """The kind this instance was built from."""
        return self._kind

    @property
    def events(self) -> EventEmitter:
        return self._events

    # -- Accessors ---------------------------------------------------------

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        kind = self.__dict__.get("_kind")
        if kind is None or name not in kind.schema:
            raise UnknownAttributeError(name, kind.name if kind is not None else None)

        def accessor(value: Any = MISSING) -> Any:
            if value is MISSING:
                return self.get(name)
            return self._assign(name, value)

        accessor.__name__ = name
        accessor.__qualname__ = f"{kind.name}.{name}"
        return accessor

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._kind.schema.names))

    def get(self, attr: str, default: Any = None) -> Any:
        """Current value of *attr*, or *default* when it is absent."""
        self._check(attr)
        return self._attrs.get(attr, default)

    def set(self, bag: Mapping[str, Any] | None = None, /, **attrs: Any) -> Instance:
        """Assign several attributes; undeclared keys are ignored.

        Each assignment behaves like the single-attribute accessor, so one
        pair of change events fires per attribute that actually changed.
        """
        values = {**(bag or {}), **attrs}
        schema = self._kind.schema
        for name, value in values.items():
            if name in schema:
                self._assign(name, value)
        return self

    def has(self, attr: str) -> bool:
        """True if *attr* is present and not ``None``."""
        return self._attrs.get(attr) is not None

    def to_dict(self) -> dict[str, Any]:
        """Present attributes in declaration order (absent ones omitted)."""
        return {
            declaration.name: self._attrs[declaration.name]
            for declaration in self._kind.schema
            if declaration.name in self._attrs
        }

    to_json = to_dict

    def _check(self, attr: str) -> None:
        if attr not in self._kind.schema:
            raise UnknownAttributeError(attr, self._kind.name)

    def _assign(self, attr: str, value: Any) -> Instance:
        self._check(attr)
        old = self._attrs.get(attr, MISSING)
        if _same(old, value):
            return self

        if attr == self._kind.primary_key and self._persisted and old is not MISSING:
            raise IdentifierImmutableError().with_context(
                kind=self._kind.name, attr=attr, identifier=old
            )

        self._attrs[attr] = value
        if attr not in self._dirty:
            self._dirty[attr] = old
        elif _same(self._dirty[attr], value):
            # back to its value at the last boundary
            del self._dirty[attr]

        self._events.emit(f"change {attr}", value, _visible(old))
        self._events.emit("change", attr, value, _visible(old))
        return self

    # -- State -------------------------------------------------------------

    def is_new(self) -> bool:
        """True until the instance has an identifier."""
        return self._attrs.get(self._kind.primary_key) is None

    def changed(self, attr: str | None = None) -> dict[str, Any] | bool:
        """Dirty state since the last save/hydration boundary.

        With no argument, returns ``{attr: value at the boundary}`` for every
        dirty attribute (absent values reported as ``None``), or False when
        nothing changed.  With *attr*, returns whether that attribute is dirty.
        """
        if attr is not None:
            return attr in self._dirty
        if not self._dirty:
            return False
        return {name: _visible(value) for name, value in self._dirty.items()}

    def changes(self) -> dict[str, Any]:
        """Current values of the dirty attributes."""
        return {name: self._attrs.get(name) for name in self._dirty}

    def is_valid(self) -> bool:
        """Run every validator of the kind and report whether none complained."""
        run_validators(self, self._kind.validators)
        return not self.errors

    def _mark_saved(self, stored: Mapping[str, Any]) -> None:
        """Make *stored* (what the adapter received) the new boundary."""
        self._dirty = {
            name: stored.get(name, MISSING)
            for name in self._kind.schema.names
            if not _same(stored.get(name, MISSING), self._attrs.get(name, MISSING))
        }
        self._persisted = True

    def _operation_lock(self) -> contextlib.AbstractAsyncContextManager:
        if not get_settings().serialize_operations:
            return contextlib.nullcontext()
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    # -- Persistence -------------------------------------------------------

    async def save(self, callback: Callable[..., Any] | None = None) -> Result[Instance]:
        """Validate and persist; see :func:`modeler.model.lifecycle.save`."""
        return await lifecycle.save(self, callback)

    async def destroy(self, callback: Callable[..., Any] | None = None) -> Result[Instance]:
        """Remove from storage; see :func:`modeler.model.lifecycle.destroy`."""
        return await lifecycle.destroy(self, callback)

    # -- Events ------------------------------------------------------------

    def on(self, name: str, fn: Listener) -> Instance:
        self._events.on(name, fn)
        return self

    def once(self, name: str, fn: Listener) -> Instance:
        self._events.once(name, fn)
        return self

    def off(self, name: str | None = None, fn: Listener | None = None) -> Instance:
        self._events.off(name, fn)
        return self

    def emit(self, name: str, *args: Any) -> bool:
        return self._events.emit(name, *args)

    def __repr__(self) -> str:
        return f"<{self._kind.name} {self.to_dict()!r}>"
