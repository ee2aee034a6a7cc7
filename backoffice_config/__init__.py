"""
backoffice_config — single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads settings files or
    environment variables directly.

Architecture position:
    Configuration.  Sits beside ``backoffice_kernel``; the kernel receives a
    ``Settings`` instance from its caller and never imports the loader.

Failure modes:
    - ``FileNotFoundError`` -- an explicit settings path does not exist.
    - ``ValueError`` -- unknown keys or out-of-range values.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from backoffice_config.loader import (
    DEFAULTS_PATH,
    apply_env_overrides,
    load_yaml_file,
    merge_sections,
    parse_settings,
)
from backoffice_config.schema import (
    CascadeSettings,
    DatabaseSettings,
    Settings,
    StoreSettings,
)

__all__ = [
    "CascadeSettings",
    "DatabaseSettings",
    "Settings",
    "StoreSettings",
    "get_active_settings",
]

_logger = logging.getLogger("backoffice_kernel.config")


def get_active_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """The ONLY public settings entrypoint.

    Layers, lowest precedence first: packaged ``defaults.yaml``, the file at
    ``path`` (when given), then ``BACKOFFICE_*`` / ``DATABASE_URL``
    environment variables.

    Args:
        path: Optional YAML settings file overriding the defaults.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        Frozen ``Settings``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If settings validation fails.
    """
    data = merge_sections(load_yaml_file(DEFAULTS_PATH), {})
    if path is not None:
        data = merge_sections(data, load_yaml_file(Path(path)))
    data = apply_env_overrides(data, os.environ if environ is None else environ)

    settings = parse_settings(data)

    _logger.info(
        "settings_loaded",
        extra={
            "settings_path": str(path) if path else None,
            "database_dialect": settings.database.url.split(":", 1)[0],
            "cascade_max_attempts": settings.cascade.max_attempts,
            "in_clause_batch_size": settings.store.in_clause_batch_size,
        },
    )
    return settings
