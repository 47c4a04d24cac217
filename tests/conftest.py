"""
Shared pytest fixtures and configuration for modeler tests.

This module provides:
- Settings isolation (env vars and the cached settings object)
- A fresh recording in-memory adapter per test
- ``User`` and ``Pet`` kinds declared the way applications declare them
"""

import os
import sys
from pathlib import Path

import pytest

# Ensure modeler and tests._support are importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from modeler import define_kind
from modeler.core.settings import reset_settings
from tests._support import RecordingAdapter, required


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Drop MODELER_* env vars and the cached settings around every test."""
    for key in list(os.environ):
        if key.startswith("MODELER_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# Kinds
# =============================================================================


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def User(adapter):
    return (
        define_kind("User", adapter=adapter)
        .attr("id", type="number")
        .attr("name", type="string")
        .attr("age", type="number")
    )


@pytest.fixture
def Pet(adapter):
    return (
        define_kind("Pet", adapter=adapter)
        .attr("id")
        .attr("name")
        .attr("species")
        .use(required("name"))
    )
