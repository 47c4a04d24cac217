"""Entity model engine: schema, instances, validation and lifecycle.

Modules
-------
schema       AttributeDeclaration / Schema -- ordered attribute declarations
validation   ValidationError / run_validators -- the validation pipeline
instance     Instance -- attribute storage, dirty tracking, accessors
lifecycle    save / destroy / fetch -- adapter orchestration and events
kind         Kind / define_kind -- the declaration API and instance factory
"""

from modeler.model.instance import Instance
from modeler.model.kind import Kind, Plugin, define_kind
from modeler.model.schema import MISSING, AttributeDeclaration, Schema
from modeler.model.validation import Reporter, ValidationError, Validator, run_validators

__all__ = [
    "AttributeDeclaration",
    "Instance",
    "Kind",
    "MISSING",
    "Plugin",
    "Reporter",
    "Schema",
    "ValidationError",
    "Validator",
    "define_kind",
    "run_validators",
]
