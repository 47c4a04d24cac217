"""
Save, destroy and lookup orchestration.

These coroutines coordinate the validation pipeline, the dirty map, the
event buses and the kind's persistence adapter.  None of them raises for an
expected failure: the outcome is returned as ``Ok(instance)`` / ``Err(error)``
and, when a callback is given, also passed to it error-first.

Event order
-----------
save:     instance ``saving`` → kind ``saving(instance)`` → validate → adapter
          → instance ``save`` → kind ``save(instance)`` → callback(None)
destroy:  kind ``destroying(instance)`` → adapter → ``destroyed = True``
          → instance ``destroy`` → kind ``destroy(instance)`` → callback(None)

Failed validation or a failed adapter call leaves the identifier, the dirty
map and the destroyed flag exactly as they were.  Adapter errors are passed
through as the adapter raised them.

A successful save rebases the dirty map on the snapshot that was sent to the
adapter: attributes changed while the adapter call was pending stay dirty.

Overlapping ``save``/``destroy`` calls on one instance queue on a
per-instance ``asyncio.Lock`` (``MODELER_SERIALIZE_OPERATIONS``, default on).
With serialization off, a create that finishes after another create already
assigned the identifier fails with ``IdentifierImmutableError``.
Callbacks run after the lock is released, so a callback may start the next
operation.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from modeler.core.errors import (
    AdapterError,
    IdentifierImmutableError,
    NotFoundError,
    NotSavedFailure,
    SchemaError,
    ValidationFailure,
)
from modeler.core.logging import get_logger
from modeler.core.result import Err, Ok, Result, from_optional, try_result_async

if TYPE_CHECKING:
    from modeler.model.instance import Instance
    from modeler.model.kind import Kind

__all__ = ["save", "destroy", "fetch"]

log = get_logger(__name__)


async def _invoke(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


def _error_of(result: Result[Any]) -> Exception | None:
    return result.error if isinstance(result, Err) else None


def _identifier_from(created: Any, primary_key: str) -> Any:
    if isinstance(created, Mapping):
        return created.get(primary_key)
    return created


async def _call_adapter(kind: Kind, operation: str, *args: Any) -> Any:
    # adapter resolution errors (ConfigError) land in the Err too
    return await getattr(kind.adapter, operation)(*args)


async def save(instance: Instance, callback: Callable[..., Any] | None = None) -> Result[Instance]:
    """Validate *instance* and create or update it through the adapter.

    Args:
        instance: The instance to persist
        callback: Optional ``callback(err)``; ``err`` is None on success.
            May be a coroutine function.

    Returns:
        ``Ok(instance)`` or ``Err(error)`` where error is a
        :class:`ValidationFailure` or whatever the adapter raised
    """
    async with instance._operation_lock():
        result = await _save(instance)
    await _invoke(callback, _error_of(result))
    return result


async def _save(instance: Instance) -> Result[Instance]:
    kind = instance.kind
    primary_key = kind.primary_key
    creating = instance.is_new()

    instance.emit("saving")
    kind.emit("saving", instance)
    log.debug("instance_saving", kind=kind.name, identifier=instance._attrs.get(primary_key), new=creating)

    try:
        valid = instance.is_valid()
    except Exception as e:
        log.error("validator_error", kind=kind.name, error=str(e), error_type=type(e).__name__)
        return Err(e)

    if not valid:
        failure = ValidationFailure(errors=instance.errors).with_context(
            kind=kind.name, identifier=instance._attrs.get(primary_key)
        )
        log.debug("instance_invalid", kind=kind.name, errors=[str(e) for e in instance.errors])
        return Err(failure)

    if primary_key not in kind.schema:
        return Err(
            SchemaError(f"{kind.name} declares no {primary_key!r} attribute to hold identifiers")
            .with_context(kind=kind.name, attr=primary_key)
        )

    snapshot = instance.to_dict()
    if creating:
        result = await try_result_async(_call_adapter, kind, "create", snapshot)
    else:
        result = await try_result_async(_call_adapter, kind, "update", instance.get(primary_key), snapshot)

    if isinstance(result, Err):
        log.debug("instance_save_failed", kind=kind.name, error=str(result.error))
        return Err(result.error)

    if creating:
        identifier = _identifier_from(result.value, primary_key)
        if identifier is None:
            return Err(
                AdapterError("adapter create() returned no identifier").with_context(kind=kind.name)
            )
        current = instance.get(primary_key)
        if instance._persisted and current != identifier:
            # an overlapping save already persisted this instance
            log.warning(
                "instance_created_twice", kind=kind.name, identifier=current, duplicate=identifier
            )
            return Err(
                IdentifierImmutableError().with_context(
                    kind=kind.name, attr=primary_key, identifier=current, duplicate=identifier
                )
            )
        instance._assign(primary_key, identifier)
        snapshot = {**snapshot, primary_key: identifier}

    instance._mark_saved(snapshot)
    log.debug("instance_saved", kind=kind.name, identifier=instance.get(primary_key), created=creating)

    instance.emit("save")
    kind.emit("save", instance)
    return Ok(instance)


async def destroy(instance: Instance, callback: Callable[..., Any] | None = None) -> Result[Instance]:
    """Remove a persisted *instance* through the adapter.

    A never-saved instance fails with :class:`NotSavedFailure` without any
    event or adapter call.

    Args:
        instance: The instance to remove
        callback: Optional ``callback(err)``; ``err`` is None on success
    """
    async with instance._operation_lock():
        result = await _destroy(instance)
    await _invoke(callback, _error_of(result))
    return result


async def _destroy(instance: Instance) -> Result[Instance]:
    kind = instance.kind
    if instance.is_new():
        return Err(NotSavedFailure().with_context(kind=kind.name))

    identifier = instance.get(kind.primary_key)
    kind.emit("destroying", instance)

    result = await try_result_async(_call_adapter, kind, "remove", identifier)
    if isinstance(result, Err):
        log.debug("instance_destroy_failed", kind=kind.name, identifier=identifier, error=str(result.error))
        return Err(result.error)

    instance.destroyed = True
    log.debug("instance_destroyed", kind=kind.name, identifier=identifier)

    instance.emit("destroy")
    kind.emit("destroy", instance)
    return Ok(instance)


async def fetch(kind: Kind, identifier: Any, callback: Callable[..., Any] | None = None) -> Result[Instance]:
    """Load the record stored under *identifier* as a hydrated instance.

    Args:
        kind: Kind to build the instance from
        identifier: Primary identifier to look up
        callback: Optional ``callback(err, instance)``

    Returns:
        ``Ok(instance)``, ``Err(NotFoundError)`` when the adapter has no such
        record, or ``Err(error)`` with whatever the adapter raised
    """
    result = await try_result_async(_call_adapter, kind, "fetch", identifier)
    result = result.flat_map(
        lambda record: from_optional(
            record,
            NotFoundError(f"{kind.name} {identifier!r} not found").with_context(
                kind=kind.name, identifier=identifier
            ),
        )
    )

    if isinstance(result, Err):
        log.debug("instance_fetch_failed", kind=kind.name, identifier=identifier, error=str(result.error))
        await _invoke(callback, result.error, None)
        return Err(result.error)

    bag = dict(result.value)
    if bag.get(kind.primary_key) is None:
        bag[kind.primary_key] = identifier
    instance = kind(bag)
    log.debug("instance_fetched", kind=kind.name, identifier=identifier)

    await _invoke(callback, None, instance)
    return Ok(instance)
