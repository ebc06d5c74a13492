"""Settings for errchain.

Trace capture and logging defaults are read from ``ERRCHAIN_*`` environment
variables (or a ``.env`` file) and cached, so constructing an error never
re-parses the environment.

Examples:
    >>> from errchain.settings import get_settings
    >>> get_settings().capture_trace
    True

Tags:
    settings, configuration, pydantic, environment, errchain
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ErrchainSettings(BaseSettings):
    """Process-wide errchain configuration.

    Fields
    ──────
    capture_trace : Record a traceback snapshot when an error is constructed
    trace_limit   : Maximum number of frames kept in a captured trace
    log_level     : Structlog log level used by ``configure_logging``
    log_json      : JSON output (True), console (False), or auto by TTY (None)
    """

    model_config = SettingsConfigDict(
        env_prefix="ERRCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Traces ───────────────────────────────────────────────────
    capture_trace: bool = Field(default=True)
    trace_limit: int = Field(default=32, ge=1)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_json: bool | None = Field(default=None)


_settings_cache: dict[str, ErrchainSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ErrchainSettings:
    """Load, validate, and cache the :class:`ErrchainSettings` instance."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = ErrchainSettings()
    return _settings_cache["default"]


def reset_settings() -> None:
    """Drop the cached settings; the next ``get_settings()`` re-reads the environment."""
    _settings_cache.clear()


__all__ = [
    "ErrchainSettings",
    "get_settings",
    "reset_settings",
]
