"""
Test support utilities for modeler tests.

Helpers that are not fixtures but are shared across test modules: the
``required`` validator plugin and adapter doubles.
"""

from __future__ import annotations

from typing import Any

from modeler import InMemoryAdapter
from modeler.core.errors import AdapterError


def required(attr: str):
    """Plugin: report ``field required`` when *attr* has no value."""

    def plugin(kind):
        def check(instance, report):
            if not instance.has(attr):
                report(attr, "field required")

        kind.validate(check)

    return plugin


class RecordingAdapter(InMemoryAdapter):
    """In-memory adapter that logs every call as ``(operation, args...)``."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.calls: list[tuple] = []

    @property
    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def create(self, attributes):
        self.calls.append(("create", dict(attributes)))
        return await super().create(attributes)

    async def update(self, identifier, attributes):
        self.calls.append(("update", identifier, dict(attributes)))
        return await super().update(identifier, attributes)

    async def fetch(self, identifier):
        self.calls.append(("fetch", identifier))
        return await super().fetch(identifier)

    async def remove(self, identifier):
        self.calls.append(("remove", identifier))
        return await super().remove(identifier)


class FailingAdapter(RecordingAdapter):
    """Recording adapter whose operations named in ``fail`` raise ``error``.

    Failing calls are still recorded; ``fail`` can be changed mid-test.
    """

    def __init__(self, fail: set[str] | None = None, error: Exception | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.fail = set(fail or ())
        self.error = error or AdapterError("storage offline")

    async def create(self, attributes):
        if "create" in self.fail:
            self.calls.append(("create", dict(attributes)))
            raise self.error
        return await super().create(attributes)

    async def update(self, identifier, attributes):
        if "update" in self.fail:
            self.calls.append(("update", identifier, dict(attributes)))
            raise self.error
        return await super().update(identifier, attributes)

    async def fetch(self, identifier):
        if "fetch" in self.fail:
            self.calls.append(("fetch", identifier))
            raise self.error
        return await super().fetch(identifier)

    async def remove(self, identifier):
        if "remove" in self.fail:
            self.calls.append(("remove", identifier))
            raise self.error
        return await super().remove(identifier)


__all__ = ["required", "RecordingAdapter", "FailingAdapter"]
