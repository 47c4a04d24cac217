"""
modeler - schema-driven entity models.

Declare a kind once (attributes, defaults, validators), then build, mutate,
observe, validate and persist its instances through an injected adapter.

Usage::

    from modeler import define_kind, InMemoryAdapter

    Pet = (
        define_kind("Pet", adapter=InMemoryAdapter())
        .attr("id")
        .attr("name")
        .attr("species")
    )

    pet = Pet(name="Tobi", species="Ferret")
    pet.on("change name", lambda new, old: print(old, "->", new))
    pet.name("Loki")

    result = await pet.save()
    if result.is_ok():
        loaded = (await Pet.get(pet.id())).unwrap()
"""

from modeler.adapters import InMemoryAdapter, get_adapter
from modeler.core.errors import (
    AdapterError,
    ModelerError,
    NotFoundError,
    NotSavedFailure,
    SchemaError,
    ValidationFailure,
)
from modeler.core.events import EventEmitter
from modeler.core.result import Err, Ok, Result
from modeler.model import (
    MISSING,
    AttributeDeclaration,
    Instance,
    Kind,
    ValidationError,
    define_kind,
)

__version__ = "0.1.0"

__all__ = [
    "AdapterError",
    "AttributeDeclaration",
    "Err",
    "EventEmitter",
    "InMemoryAdapter",
    "Instance",
    "Kind",
    "MISSING",
    "ModelerError",
    "NotFoundError",
    "NotSavedFailure",
    "Ok",
    "Result",
    "SchemaError",
    "ValidationError",
    "ValidationFailure",
    "define_kind",
    "get_adapter",
    "__version__",
]
