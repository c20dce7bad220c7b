"""
Centralized settings for shipyard.

:class:`ShipyardSettings` is a single validated, cached source of truth
for the database URL, the version-locking strategy, formation defaults and
logging.  Values come from ``SHIPYARD_*`` environment variables and an
optional ``.env`` file.

Examples:
    >>> import os
    >>> os.environ["SHIPYARD_LOCK_STRATEGY"] = "app"
    >>> get_settings(_force_reload=True).lock_strategy.value
    'app'

Tags:
    shipyard-core, configuration, settings, pydantic
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidConfigError, MissingConfigError

GiB = 1024 * 1024 * 1024


class LockStrategy(str, Enum):
    """How :class:`~shipyard.releases.sequencer.VersionSequencer` serialises creators.

    ``ROWS`` locks the application's existing release rows only, which leaves
    concurrent *first* releases unserialised.  ``APP`` additionally locks a
    per-application row in ``app_locks`` so first releases are covered too.
    """

    ROWS = "rows"
    APP = "app"


class ShipyardSettings(BaseSettings):
    """Process-wide settings, read from ``SHIPYARD_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SHIPYARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///shipyard.db")
    database_echo: bool = Field(default=False)
    database_pool_size: int | None = Field(default=None)
    sqlite_busy_timeout: float = Field(
        default=30.0, description="Seconds a SQLite writer waits for the database lock"
    )

    # ── Versioning ───────────────────────────────────────────────
    lock_strategy: LockStrategy = Field(default=LockStrategy.ROWS)

    # ── Formation defaults ───────────────────────────────────────
    default_quantity: int = Field(default=0, ge=0)
    default_quantities: dict[str, int] = Field(default_factory=dict)
    default_cpu_share: int = Field(default=256, gt=0)
    default_memory: int = Field(default=GiB, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("database_url")
    @classmethod
    def _validate_database_url(cls, value: str) -> str:
        if not value.strip():
            raise MissingConfigError("database_url")
        return value

    @field_validator("lock_strategy", mode="before")
    @classmethod
    def _validate_lock_strategy(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return LockStrategy(value.lower())
            except ValueError:
                raise InvalidConfigError("lock_strategy", value) from None
        return value

    @field_validator("default_quantities")
    @classmethod
    def _validate_quantities(cls, value: dict[str, int]) -> dict[str, int]:
        for process_type, quantity in value.items():
            if quantity < 0:
                raise InvalidConfigError(f"default_quantities[{process_type}]", quantity)
        return value

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise InvalidConfigError("log_format", value)
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


_settings_cache: ShipyardSettings | None = None


def get_settings(*, _force_reload: bool = False) -> ShipyardSettings:
    """Load, validate, and cache a :class:`ShipyardSettings` instance."""
    global _settings_cache
    if _settings_cache is None or _force_reload:
        _settings_cache = ShipyardSettings()
    return _settings_cache


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    global _settings_cache
    _settings_cache = None


__all__ = [
    "GiB",
    "LockStrategy",
    "ShipyardSettings",
    "get_settings",
    "clear_settings_cache",
]
