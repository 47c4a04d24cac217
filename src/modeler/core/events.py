"""
Synchronous named-event emitter.

Every ``Kind`` and every ``Instance`` owns one ``EventEmitter``.  Listeners
are plain callables registered per event name; ``emit`` calls them in
registration order on the caller's stack and passes the event arguments
positionally.

Manifesto:
    Lifecycle code must not be derailed by an observer.  A listener that
    raises is logged and skipped; the remaining listeners still run and the
    save/destroy that emitted the event carries on.

Architecture:
    ::

        on("change name", fn) ──┐
        once("save", fn)  ──────┼──> _listeners["change name"] = [_Listener, ...]
        off("save", fn)   ──────┘
                                    emit(name, *args)
                                      │ snapshot of _listeners[name]
                                      ├─ skip records removed mid-dispatch
                                      ├─ drop once-records before calling
                                      └─ call fn(*args); log + continue on error

Guardrails:
    - Dispatch iterates over a snapshot, so ``off`` inside a listener never
      skips or repeats the listeners around it
    - Not thread-safe; one logical actor per emitter

Examples:
    >>> bus = EventEmitter()
    >>> seen = []
    >>> bus.on("change", lambda attr, new, old: seen.append((attr, new, old)))
    <EventEmitter ...>
    >>> bus.emit("change", "name", "Luna", "Tobi")
    True
    >>> seen
    [('name', 'Luna', 'Tobi')]

Tags:
    events, observer, emitter, synchronous, modeler

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from modeler.core.logging import get_logger

__all__ = ["EventEmitter", "Listener"]

log = get_logger(__name__)

Listener = Callable[..., Any]


@dataclass
class _Listener:
    """Internal listener record."""

    fn: Listener
    once: bool = False
    removed: bool = False


class EventEmitter:
    """Per-object registry of named-event listeners.

    ``on``/``once``/``off`` return the emitter so registrations chain.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Listener]] = {}

    def on(self, name: str, fn: Listener) -> EventEmitter:
        """Register *fn* for every future ``emit(name, ...)``."""
        self._listeners.setdefault(name, []).append(_Listener(fn))
        return self

    def once(self, name: str, fn: Listener) -> EventEmitter:
        """Register *fn* for the next ``emit(name, ...)`` only."""
        self._listeners.setdefault(name, []).append(_Listener(fn, once=True))
        return self

    def off(self, name: str | None = None, fn: Listener | None = None) -> EventEmitter:
        """Remove listeners.

        ``off()`` clears everything, ``off(name)`` clears one event and
        ``off(name, fn)`` removes every registration of *fn* for *name*,
        including ``once`` registrations.
        """
        if name is None:
            for records in self._listeners.values():
                for record in records:
                    record.removed = True
            self._listeners.clear()
            return self

        records = self._listeners.get(name)
        if not records:
            return self

        if fn is None:
            removed, kept = records, []
        else:
            removed = [r for r in records if r.fn == fn]
            kept = [r for r in records if r.fn != fn]

        for record in removed:
            record.removed = True
        if kept:
            self._listeners[name] = kept
        else:
            del self._listeners[name]
        return self

    def emit(self, name: str, *args: Any) -> bool:
        """Call every listener registered for *name* with ``*args``.

        Returns:
            True if at least one listener was invoked
        """
        records = self._listeners.get(name)
        if not records:
            return False

        called = False
        for record in list(records):
            if record.removed:
                continue
            if record.once:
                self._discard(name, record)
            called = True
            try:
                record.fn(*args)
            except Exception as e:
                log.warning(
                    "event_listener_error",
                    event_name=name,
                    listener=getattr(record.fn, "__qualname__", repr(record.fn)),
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return called

    def listeners(self, name: str) -> list[Listener]:
        """Listeners currently registered for *name*, in dispatch order."""
        return [r.fn for r in self._listeners.get(name, ())]

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, ()))

    def has_listeners(self, name: str) -> bool:
        return bool(self._listeners.get(name))

    def _discard(self, name: str, record: _Listener) -> None:
        record.removed = True
        records = self._listeners.get(name)
        if records is None:
            return
        remaining = [r for r in records if r is not record]
        if remaining:
            self._listeners[name] = remaining
        else:
            del self._listeners[name]

    def __repr__(self) -> str:
        counts = {name: len(records) for name, records in self._listeners.items()}
        return f"<EventEmitter {counts}>"
