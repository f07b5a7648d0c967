"""
Application configuration schema.

The YAML file is parsed into these frozen dataclasses by the loader; the
rest of the codebase only ever sees an ``AppConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

STORAGE_BACKENDS = ("local", "s3")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("database.url is required")
        if self.pool_size < 1:
            raise ValueError("database.pool_size must be at least 1")
        if self.max_overflow < 0:
            raise ValueError("database.max_overflow cannot be negative")


@dataclass(frozen=True)
class StorageSettings:
    """Where uploaded documents go.

    ``local`` needs ``root``; ``s3`` needs ``bucket``.
    """

    backend: str = "local"
    root: str | None = None
    bucket: str | None = None
    prefix: str = ""
    region: str | None = None
    endpoint_url: str | None = None

    def __post_init__(self) -> None:
        if self.backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage.backend must be one of {STORAGE_BACKENDS}, got {self.backend!r}"
            )
        if self.backend == "local" and not self.root:
            raise ValueError("storage.root is required for the local backend")
        if self.backend == "s3" and not self.bucket:
            raise ValueError("storage.bucket is required for the s3 backend")


@dataclass(frozen=True)
class AppConfig:
    """The complete runtime configuration.

    ``workflow`` is passed through to ``VoucherConfig.from_dict``, which
    validates it.  ``checksum`` identifies the source document.
    """

    database: DatabaseSettings
    storage: StorageSettings
    workflow: dict[str, Any] = field(default_factory=dict)
    log_level: str = "INFO"
    source: str = "<defaults>"
    checksum: str = ""

    def __post_init__(self) -> None:
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
