"""Environment-driven settings for docrun.

Every knob of the launcher protocol lives here so a Makefile can set them
with ``DOCRUN_*`` variables (or a ``.env`` file) instead of flags.

Fields
──────
engine          : ``module:attr`` import path of the documentation engine
ready_service   : Service name the startup gate waits for
poll_interval   : Seconds yielded between startup-gate polls (0 = bare yield)
flush_delay     : Fallback flush window before a failing exit, in seconds
failure_depth   : Nesting depth printed for caught failures
abnormal_depth  : Nesting depth printed for uncaught abnormal signals
log_level       : Structlog log level
json_logs       : Emit diagnostics as JSON lines

Examples:
    >>> DocrunSettings(flush_delay=0).flush_delay
    0.0
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_READY_SERVICE = "code_loader"


class DocrunSettings(BaseSettings):
    """Settings shared by the CLI and the programmatic entry points."""

    model_config = SettingsConfigDict(
        env_prefix="DOCRUN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Engine ───────────────────────────────────────────────────
    engine: str | None = Field(
        default=None,
        description="Import path of the documentation engine, 'module:attr'",
    )

    # ── Lifecycle ────────────────────────────────────────────────
    ready_service: str = DEFAULT_READY_SERVICE
    poll_interval: float = Field(default=0.0, ge=0.0)
    flush_delay: float = Field(default=1.0, ge=0.0)
    failure_depth: int = Field(default=10, ge=1)
    abnormal_depth: int = Field(default=15, ge=1)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> DocrunSettings:
    """Return the process-wide settings (cached)."""
    return DocrunSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()


__all__ = ["DEFAULT_READY_SERVICE", "DocrunSettings", "get_settings", "reset_settings"]
