"""Engine-wide settings.

``ModelerSettings`` holds the handful of knobs the engine reads at runtime:
log level and format, the adapter kinds fall back to when declared without
one, and whether save/destroy calls on one instance are serialized.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked when first loaded
    - **Environment-driven:** Reads ``MODELER_*`` env vars and a ``.env`` file
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from modeler.core.settings import get_settings
    >>> get_settings().default_adapter
    'memory'

Tags:
    settings, configuration, pydantic, environment, modeler

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelerSettings(BaseSettings):
    """Settings read from the environment (prefix ``MODELER_``).

    Fields
    ──────
    service_name          : Service name stamped on every log line
    log_level             : Structlog log level
    json_logs             : JSON output; ``None`` auto-detects from the TTY
    default_adapter       : Registry name used when a kind has no adapter
    serialize_operations  : Queue overlapping save/destroy calls per instance
    """

    model_config = SettingsConfigDict(
        env_prefix="MODELER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    service_name: str = "modeler"
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Persistence ──────────────────────────────────────────────
    default_adapter: str = Field(
        default="memory",
        description="Adapter registry name used when define_kind() gets no adapter",
    )
    serialize_operations: bool = True

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


_settings: ModelerSettings | None = None


def get_settings(*, _force_reload: bool = False) -> ModelerSettings:
    """Load, validate, and cache the process-wide settings."""
    global _settings
    if _settings is None or _force_reload:
        _settings = ModelerSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "ModelerSettings",
    "get_settings",
    "reset_settings",
]
