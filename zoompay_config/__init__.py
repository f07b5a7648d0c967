"""
zoompay_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration.  Sits above ``zoompay_kernel`` and below
    ``zoompay_services`` / ``zoompay_modules``.  The kernel MUST NEVER
    import from ``zoompay_config``.

Layering (later wins):
    1. ``zoompay_config/defaults.yaml`` shipped with the package.
    2. The file named by ``path`` or, failing that, ``$ZOOMPAY_CONFIG``.
    3. ``$DATABASE_URL`` and ``$ZOOMPAY_BLOB_ROOT``.

Failure modes:
    - ``ConfigurationError`` -- file missing or unreadable, invalid YAML,
      unknown keys, invalid values.

Audit relevance:
    Every successful call emits a ``config_loaded`` log entry carrying the
    source and the checksum of the merged document.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from zoompay_config.loader import (
    apply_env_overrides,
    compute_checksum,
    load_yaml_file,
    merge,
    parse_app_config,
)
from zoompay_config.schema import AppConfig, DatabaseSettings, StorageSettings
from zoompay_kernel.exceptions import ConfigurationError
from zoompay_kernel.logging_config import get_logger

logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(
    path: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Deployment configuration file.  Defaults to
            ``$ZOOMPAY_CONFIG`` when set; otherwise only the shipped
            defaults apply.
        environ: Environment to read overrides from (defaults to
            ``os.environ``).

    Raises:
        ConfigurationError: if any layer cannot be loaded or the merged
            document fails validation.
    """
    env = os.environ if environ is None else environ
    override_path = path or env.get("ZOOMPAY_CONFIG")
    source = str(override_path) if override_path else str(DEFAULTS_PATH)

    try:
        data = load_yaml_file(DEFAULTS_PATH)
        if override_path:
            data = merge(data, load_yaml_file(Path(override_path)))
        data = apply_env_overrides(data, env)
        checksum = compute_checksum(data)
        config = parse_app_config(data, source=source, checksum=checksum)
    except (OSError, yaml.YAMLError, ValueError, TypeError) as exc:
        logger.error("config_load_failed", extra={"source": source, "error": str(exc)})
        raise ConfigurationError(source, str(exc)) from exc

    logger.info(
        "config_loaded",
        extra={
            "source": source,
            "checksum": checksum,
            "storage_backend": config.storage.backend,
            "log_level": config.log_level,
        },
    )
    return config


__all__ = [
    "AppConfig",
    "DatabaseSettings",
    "StorageSettings",
    "get_active_config",
]
