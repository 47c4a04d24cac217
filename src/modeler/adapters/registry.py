"""Persistence adapter registry and factory.

Manifesto:
    Kind declarations should never hard-code adapter class names.  The
    registry maps names to adapter factories and ``get_adapter()`` builds a
    fresh adapter for a kind declared without one.

Features:
    - ``AdapterRegistry`` singleton with ``memory`` pre-registered
    - ``register()`` for application adapters
    - ``get_adapter()`` factory: name + kwargs → adapter instance

Tags:
    adapter, registry, factory, singleton, modeler

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any, Callable

from modeler.core.errors import ConfigError
from modeler.core.protocols import PersistenceAdapter

from .memory import InMemoryAdapter

AdapterFactory = Callable[..., PersistenceAdapter]


class AdapterRegistry:
    """
    Registry for persistence adapter factories.

    Pre-registered adapters:
    - ``memory`` — :class:`InMemoryAdapter`
    """

    def __init__(self):
        self._factories: dict[str, AdapterFactory] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["memory"] = InMemoryAdapter

    def register(self, name: str, factory: AdapterFactory) -> None:
        """Register an adapter factory (a class or any callable)."""
        self._factories[name.lower()] = factory

    def unregister(self, name: str) -> None:
        self._factories.pop(name.lower(), None)

    def create(self, name: str, **kwargs: Any) -> PersistenceAdapter:
        """Create an adapter by name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown persistence adapter: {name}").with_context(
                adapter=name, available=self.list_adapters()
            )
        return self._factories[name](**kwargs)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(name: str | None = None, **kwargs: Any) -> PersistenceAdapter:
    """
    Get a persistence adapter by name.

    Without a name the configured ``MODELER_DEFAULT_ADAPTER`` is used.

    Usage:
        adapter = get_adapter()
        adapter = get_adapter("memory", latency=0.01)
    """
    if name is None:
        from modeler.core.settings import get_settings

        name = get_settings().default_adapter
    return adapter_registry.create(name, **kwargs)


__all__ = [
    "AdapterFactory",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
