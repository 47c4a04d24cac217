"""Ambient infrastructure shared by the model engine.

Modules
-------
errors      ModelerError hierarchy
result      Ok / Err result envelope
events      EventEmitter -- synchronous named events
logging     structlog configuration
settings    ModelerSettings (pydantic-settings)
protocols   PersistenceAdapter protocol
"""
