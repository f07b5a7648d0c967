"""
Configuration Loader (``zoompay_config.loader``).

Responsibility
--------------
Loads YAML configuration documents, layers them (shipped defaults, then an
optional deployment file, then environment overrides) and parses the
result into the frozen dataclasses of ``zoompay_config.schema``.  The
single public entry point for runtime config is
``zoompay_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown keys in any section raise ``ValueError``; a typo never silently
  falls back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the merged
  document for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from the schema ``__post_init__``.
"""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from zoompay_config.schema import AppConfig, DatabaseSettings, StorageSettings

# Environment variable -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("database", "url"),
    "ZOOMPAY_BLOB_ROOT": ("storage", "root"),
}

_TOP_LEVEL_KEYS = frozenset({"database", "storage", "workflow", "log_level"})


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
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursive dict merge; ``override`` wins, nested mappings are merged."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    result = copy.deepcopy(dict(data))
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            result.setdefault(section, {})[key] = value
    return result


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _section(data: Mapping[str, Any], name: str, cls) -> Any:
    raw = data.get(name) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"{name}: must be a mapping")
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise ValueError(f"{name}: unknown key(s) {unknown}")
    return cls(**raw)


def parse_app_config(
    data: Mapping[str, Any], source: str = "<defaults>", checksum: str = ""
) -> AppConfig:
    """
    Parse a merged configuration document.

    Raises:
        ValueError: unknown keys or invalid values.
    """
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ValueError(f"unknown top-level key(s) {unknown}")
    workflow = data.get("workflow") or {}
    if not isinstance(workflow, Mapping):
        raise ValueError("workflow: must be a mapping")
    return AppConfig(
        database=_section(data, "database", DatabaseSettings),
        storage=_section(data, "storage", StorageSettings),
        workflow=dict(workflow),
        log_level=str(data.get("log_level", "INFO")).upper(),
        source=source,
        checksum=checksum,
    )
