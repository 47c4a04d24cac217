"""
Kind declarations.

A ``Kind`` is the factory for one entity type.  It is declared once at setup
time with a fluent API and then shared, read-only, by every instance built
from it::

    Pet = (
        define_kind("Pet")
        .attr("id", type=int)
        .attr("name", type=str)
        .attr("species", default="Ferret")
        .use(required("name"))
    )

    pet = Pet(name="Tobi")          # build an instance
    await pet.save()
    result = await Pet.get(pet.id())

Plugins are plain callables run immediately by ``use(plugin)``; they extend
the kind through the same ``attr``/``validate``/``use`` calls.

The kind owns its own event bus, separate from each instance's:
``construct(instance, bag)``, ``saving(instance)``, ``save(instance)``,
``destroying(instance)`` and ``destroy(instance)`` are emitted here.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from modeler.core.errors import SchemaError
from modeler.core.events import EventEmitter, Listener
from modeler.core.logging import get_logger
from modeler.core.protocols import PersistenceAdapter
from modeler.core.result import Result
from modeler.model import lifecycle
from modeler.model.instance import Instance
from modeler.model.schema import MISSING, AttributeDeclaration, Schema
from modeler.model.validation import Validator

__all__ = ["Kind", "Plugin", "define_kind"]

log = get_logger(__name__)

Plugin = Callable[["Kind"], Any]

_ATTR_OPTIONS = frozenset({"type", "default", "primary"})
_INSTANCE_FIELDS = frozenset({"errors", "destroyed"})


def _reserved_names() -> frozenset[str]:
    return frozenset(n for n in dir(Instance) if not n.startswith("_")) | _INSTANCE_FIELDS


class Kind:
    """Schema, validators, event bus and adapter for one entity type.

    Call the kind to build an instance: ``Kind(bag)`` or ``Kind(**attrs)``.
    """

    def __init__(self, name: str, adapter: PersistenceAdapter | None = None) -> None:
        self.name = name
        self.schema = Schema()
        self.validators: list[Validator] = []
        self.plugins: list[Plugin] = []
        self.events = EventEmitter()
        self._adapter = adapter

    # -- Declaration API ---------------------------------------------------

    def attr(self, name: str, options: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Kind:
        """Declare an attribute.

        Options (as a mapping or keyword arguments):
            type: Advisory type hint, never enforced
            default: Default value, or a zero-argument callable producing one
            primary: Mark as the primary identifier (at most one per kind)
        """
        opts = {**(options or {}), **kwargs}
        unknown = set(opts) - _ATTR_OPTIONS
        if unknown:
            raise SchemaError(f"unknown attribute options: {sorted(unknown)}").with_context(
                kind=self.name, attr=name
            )
        if not isinstance(name, str) or not name:
            raise SchemaError("attribute name must be a non-empty string").with_context(kind=self.name)
        if name.startswith("_") or name in _reserved_names():
            raise SchemaError(f"attribute name {name!r} is reserved").with_context(
                kind=self.name, attr=name
            )

        try:
            self.schema.add(
                AttributeDeclaration(
                    name=name,
                    type=opts.get("type"),
                    default=opts.get("default", MISSING),
                    primary=bool(opts.get("primary", False)),
                )
            )
        except SchemaError as e:
            raise e.with_context(kind=self.name)
        return self

    def validate(self, fn: Validator) -> Kind:
        """Append a validator ``fn(instance, report)``."""
        if not callable(fn):
            raise SchemaError("validator must be callable").with_context(kind=self.name)
        self.validators.append(fn)
        return self

    def use(self, plugin: Plugin) -> Kind:
        """Run ``plugin(self)`` now and return the kind."""
        if not callable(plugin):
            raise SchemaError("plugin must be callable").with_context(kind=self.name)
        plugin(self)
        self.plugins.append(plugin)
        log.debug("kind_plugin_applied", kind=self.name, plugin=getattr(plugin, "__qualname__", repr(plugin)))
        return self

    # -- Adapter -----------------------------------------------------------

    @property
    def adapter(self) -> PersistenceAdapter:
        """The kind's adapter; the configured default is built on first use."""
        if self._adapter is None:
            from modeler.adapters.registry import get_adapter

            self._adapter = get_adapter()
            log.debug("kind_default_adapter", kind=self.name, adapter=type(self._adapter).__name__)
        return self._adapter

    def set_adapter(self, adapter: PersistenceAdapter) -> Kind:
        if not isinstance(adapter, PersistenceAdapter):
            raise SchemaError("adapter must provide create/update/fetch/remove").with_context(
                kind=self.name
            )
        self._adapter = adapter
        return self

    # -- Schema shortcuts --------------------------------------------------

    @property
    def primary_key(self) -> str:
        return self.schema.primary_key

    @property
    def attributes(self) -> list[str]:
        return self.schema.names

    # -- Instances ---------------------------------------------------------

    def __call__(self, bag: Mapping[str, Any] | None = None, /, **attrs: Any) -> Instance:
        """Build an instance; a bag carrying an identifier is hydrated (not dirty)."""
        return Instance(self, {**(bag or {}), **attrs})

    async def get(self, identifier: Any, callback: Callable[..., Any] | None = None) -> Result[Instance]:
        """Fetch by identifier; see :func:`modeler.model.lifecycle.fetch`."""
        return await lifecycle.fetch(self, identifier, callback)

    # -- Events ------------------------------------------------------------

    def on(self, name: str, fn: Listener) -> Kind:
        self.events.on(name, fn)
        return self

    def once(self, name: str, fn: Listener) -> Kind:
        self.events.once(name, fn)
        return self

    def off(self, name: str | None = None, fn: Listener | None = None) -> Kind:
        self.events.off(name, fn)
        return self

    def emit(self, name: str, *args: Any) -> bool:
        return self.events.emit(name, *args)

    def __repr__(self) -> str:
        return f"<Kind {self.name} {self.schema.names!r}>"


def define_kind(name: str, adapter: PersistenceAdapter | None = None) -> Kind:
    """Declare a new kind.

    Args:
        name: Kind name, used in logs and error context only
        adapter: Persistence adapter; defaults to a fresh instance of the
            configured default adapter (``MODELER_DEFAULT_ADAPTER``)
    """
    kind = Kind(name)
    if adapter is not None:
        kind.set_adapter(adapter)
    return kind
