"""
Runtime settings schema.

Settings are parsed from YAML by the loader into these frozen dataclasses.
Nothing outside ``backoffice_config`` reads YAML or environment variables;
callers receive a ``Settings`` instance from ``get_active_settings()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection and pool settings for the record store."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class StoreSettings:
    """Query shaping for the SQL record store."""

    # Max ids bound into a single IN (...) clause
    in_clause_batch_size: int = 500


@dataclass(frozen=True)
class CascadeSettings:
    """Retry policy for whole-cascade attempts."""

    max_attempts: int = 3
    retry_backoff_seconds: float = 0.5


@dataclass(frozen=True)
class Settings:
    """Root settings object."""

    database: DatabaseSettings
    store: StoreSettings = field(default_factory=StoreSettings)
    cascade: CascadeSettings = field(default_factory=CascadeSettings)
