"""Layered configuration: YAML tuning defaults under environment settings.

``config/config.yaml`` holds knobs that are safe to commit (search limit,
rating, timeouts, page sizes).  Values that vary per deployment come from
:class:`~gifpicker.config.settings.Settings` and win on conflict.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from gifpicker.config.settings import Settings
from gifpicker.utils.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_config(path: str = DEFAULT_CONFIG_PATH, settings: Settings | None = None) -> dict[str, Any]:
    """Return the resolved configuration tree.

    A missing file yields the settings-derived sections alone.  A file
    whose top level is not a mapping raises :class:`ConfigurationError`.
    """
    file_config = _read_yaml(Path(path))
    return merged(file_config, _settings_sections(settings or Settings()))


def merged(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursive dict merge; *overrides* wins, neither input is modified."""
    result = dict(base)
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = merged(current, value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


def _settings_sections(settings: Settings) -> dict[str, Any]:
    return {
        "app": {
            "env": settings.app_env,
            "host": settings.app_host,
            "port": settings.app_port,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
            "timeout_seconds": settings.llm_timeout_seconds,
        },
        "quota": {
            "limit": settings.quota_limit,
            "window_seconds": settings.quota_window_seconds,
            "anonymous_enabled": settings.anonymous_quota_enabled,
        },
        "persistence": {
            "database_path": settings.database_path,
            "atomic_group_writes": settings.atomic_group_writes,
        },
        "logging": {"level": settings.log_level},
    }
