"""Persistence adapters.

Modules
-------
memory      InMemoryAdapter -- dict storage, single process
registry    AdapterRegistry / get_adapter -- name → adapter factory
"""

from modeler.adapters.memory import InMemoryAdapter
from modeler.adapters.registry import AdapterRegistry, adapter_registry, get_adapter

__all__ = [
    "InMemoryAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
