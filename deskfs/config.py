# python
"""
deskfs/config.py
Default settings for the filesystem engine, overridable via DESKFS_* environment variables.
"""
from typing import Any, Dict, Optional

from .env import env_overrides

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "path": "data/deskfs.json",
        "filesystem_key": "filesystem_v3",
        "clipboard_key": "file_clipboard_v1",
    },
    "user": {"default": "guest"},
    "journal": {"path": ""},
    "logging": {"level": "WARNING"},
    "version": "0.1",
}

ENV_OVERRIDES = {
    "DESKFS_STORAGE_PATH": ("storage", "path"),
    "DESKFS_USERNAME": ("user", "default"),
    "DESKFS_JOURNAL": ("journal", "path"),
    "DESKFS_LOG_LEVEL": ("logging", "level"),
}


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the effective configuration: defaults, then environment, then overrides.

    Sections are merged one level deep so callers may pass only the keys
    they want to change, e.g. {"storage": {"path": "/tmp/fs.json"}}.
    """
    config = {key: dict(value) if isinstance(value, dict) else value for key, value in DEFAULT_CONFIG.items()}
    for section, values in env_overrides(ENV_OVERRIDES).items():
        config[section].update(values)
    for section, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(config.get(section), dict):
            config[section] = {**config[section], **value}
        else:
            config[section] = value
    return config
