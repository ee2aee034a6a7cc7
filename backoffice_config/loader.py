"""
Settings Loader (``backoffice_config.loader``).

Responsibility
--------------
Loads YAML settings files, layers them over the packaged defaults, applies
environment overrides and parses the result into the frozen dataclasses of
``backoffice_config.schema``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or key  -> ``ValueError``.
* Out-of-range value (non-positive pool size, batch size, attempts)
  -> ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from backoffice_config.schema import (
    CascadeSettings,
    DatabaseSettings,
    Settings,
    StoreSettings,
)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_SECTIONS: dict[str, type] = {
    "database": DatabaseSettings,
    "store": StoreSettings,
    "cascade": CascadeSettings,
}

# Environment variable -> (section, key, converter), first match wins
ENV_OVERRIDES: tuple[tuple[str, str, str, type], ...] = (
    ("BACKOFFICE_DATABASE_URL", "database", "url", str),
    ("DATABASE_URL", "database", "url", str),
    ("BACKOFFICE_CASCADE_MAX_ATTEMPTS", "cascade", "max_attempts", int),
    ("BACKOFFICE_IN_CLAUSE_BATCH_SIZE", "store", "in_clause_batch_size", int),
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping, got {type(data).__name__}")
    return data


def merge_sections(
    base: Mapping[str, Any], override: Mapping[str, Any]
) -> dict[str, dict[str, Any]]:
    """Overlay ``override`` on ``base`` one section deep."""
    merged: dict[str, dict[str, Any]] = {
        name: dict(values or {}) for name, values in base.items()
    }
    for name, values in override.items():
        if name not in _SECTIONS:
            raise ValueError(f"Unknown settings section: {name!r}")
        if values is None:
            continue
        if not isinstance(values, Mapping):
            raise ValueError(f"Settings section {name!r} must be a mapping")
        merged.setdefault(name, {}).update(values)
    return merged


def apply_env_overrides(
    data: dict[str, dict[str, Any]], environ: Mapping[str, str]
) -> dict[str, dict[str, Any]]:
    """Apply ``ENV_OVERRIDES`` to already-merged settings data."""
    applied: set[tuple[str, str]] = set()
    for env_name, section, key, convert in ENV_OVERRIDES:
        if (section, key) in applied:
            continue
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_name}: {raw!r}") from e
        data.setdefault(section, {})[key] = value
        applied.add((section, key))
    return data


def _build_section(name: str, values: Mapping[str, Any]) -> Any:
    cls = _SECTIONS[name]
    allowed = set(cls.__dataclass_fields__)
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(
            f"Unknown keys in settings section {name!r}: {sorted(unknown)}"
        )
    return cls(**values)


def parse_settings(data: Mapping[str, Any]) -> Settings:
    """
    Parse a settings mapping into ``Settings``.

    Raises:
        ValueError: on unknown keys, a missing database url, or values
            outside their valid range.
    """
    database_data = data.get("database") or {}
    if not database_data.get("url"):
        raise ValueError("Settings require database.url")

    settings = Settings(
        database=_build_section("database", database_data),
        store=_build_section("store", data.get("store") or {}),
        cascade=_build_section("cascade", data.get("cascade") or {}),
    )
    _validate(settings)
    return settings


def _validate(settings: Settings) -> None:
    if settings.database.pool_size < 1:
        raise ValueError("database.pool_size must be >= 1")
    if settings.database.max_overflow < 0:
        raise ValueError("database.max_overflow must be >= 0")
    if settings.store.in_clause_batch_size < 1:
        raise ValueError("store.in_clause_batch_size must be >= 1")
    if settings.cascade.max_attempts < 1:
        raise ValueError("cascade.max_attempts must be >= 1")
    if settings.cascade.retry_backoff_seconds < 0:
        raise ValueError("cascade.retry_backoff_seconds must be >= 0")
