"""
Centralized settings for the tag engine.

All fields can be set via ``CHRONO_TAGS_*`` environment variables (e.g.
``CHRONO_TAGS_BATCH_SIZE=25``) or through a ``.env`` file.

Tags:
    configuration, settings, pydantic, environment, chrono-tags
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


class TagEngineSettings(BaseSettings):
    """Tag engine configuration.

    Fields
    ──────
    database_path        : SQLite file holding users, metrics and tag rows
    catalog_path         : YAML catalog; ``None`` uses the built-in seed
    batch_size           : Users reconciled concurrently per batch
    active_window_days   : Look-back window for the active-user query
    daily_hour           : Hour of day (0-23) for the daily run
    timezone             : Timezone the daily hour is interpreted in
    scheduler_backend    : Timing backend for the daily trigger
    notification_drain_timeout_seconds : Max wait for in-flight notifications
    log_level / log_format : structlog configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="CHRONO_TAGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    database_path: Path = Field(default=Path("data/chrono.db"))
    catalog_path: Path | None = Field(default=None)

    # ── Batch processing ─────────────────────────────────────────
    batch_size: int = Field(default=10, ge=1)
    active_window_days: int = Field(default=30, ge=1)

    # ── Scheduling ───────────────────────────────────────────────
    daily_hour: int = Field(default=3, ge=0, le=23)
    timezone: str = Field(default="UTC")
    scheduler_backend: Literal["thread", "apscheduler"] = Field(default="thread")

    # ── Notifications ────────────────────────────────────────────
    notification_drain_timeout_seconds: float = Field(default=30.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["auto", "json", "console"] = Field(default="auto")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @property
    def json_logs(self) -> bool | None:
        """Tri-state flag for :func:`configure_logging`."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


_settings_cache: dict[str, TagEngineSettings] = {}


def get_settings(*, _force_reload: bool = False, **overrides: object) -> TagEngineSettings:
    """Load, validate, and cache a :class:`TagEngineSettings` instance.

    Keyword overrides bypass the cache; they are used by the CLI to apply
    ``--database`` / ``--catalog`` options on top of the environment.

    Raises:
        ConfigError: If any value fails validation.
    """
    use_cache = not overrides
    if use_cache and not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    try:
        settings = TagEngineSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or "settings"
        raise ConfigError(key, first.get("input"), f"Invalid configuration for {key}: {first.get('msg')}") from exc

    if use_cache:
        _settings_cache["default"] = settings
    return settings


__all__ = ["TagEngineSettings", "get_settings"]
