"""Settings for the mount workflow.

Values come from DEFAULT_SETTINGS, optionally overlaid by a JSON settings
file and then by environment variables. The tool never writes the file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional


SETTINGS_PATH = Path(
    os.environ.get(
        "NTFS_MOUNTER_SETTINGS_PATH",
        Path.home() / ".config" / "ntfs-mounter" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_VOLUMES_ROOT = "/Volumes"
DEFAULT_PARTITION_MARKER = "Microsoft Basic Data"
DEFAULT_MOUNT_OPTIONS = "rw,auto_xattr,defer-permissions"

DEFAULT_SETTINGS: dict[str, Any] = {
    "volumes_root": DEFAULT_VOLUMES_ROOT,
    "partition_marker": DEFAULT_PARTITION_MARKER,
    "mount_options": DEFAULT_MOUNT_OPTIONS,
    "ntfs_3g_path": None,
    "use_sudo": True,
    "open_file_browser": True,
    "log_dir": None,
}

# Environment variable -> settings key
ENV_OVERRIDES: dict[str, str] = {
    "NTFS_MOUNTER_VOLUMES_ROOT": "volumes_root",
    "NTFS_3G_PATH": "ntfs_3g_path",
    "NTFS_MOUNTER_LOG_DIR": "log_dir",
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def _accepts(key: str, value: Any) -> bool:
    """Return True if a file value may replace the default for key.

    Unknown keys, empty strings and values whose type differs from the
    default are dropped. Keys that default to None take a string or None.
    """
    if key not in DEFAULT_SETTINGS:
        return False
    default = DEFAULT_SETTINGS[key]
    if default is None:
        return value is None or isinstance(value, str)
    return type(value) is type(default) and value != ""


def load_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SettingsStore:
    settings_store.values = dict(DEFAULT_SETTINGS)
    path = path or SETTINGS_PATH
    environ = os.environ if environ is None else environ
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            data = None
        if isinstance(data, dict):
            settings_store.values.update(
                {key: value for key, value in data.items() if _accepts(key, value)}
            )
    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            settings_store.values[key] = value
    return settings_store


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def get_bool(key: str, default: bool = False) -> bool:
    return bool(get_setting(key, default))


def get_path(key: str) -> Optional[Path]:
    value = get_setting(key)
    if not value:
        return None
    return Path(value).expanduser()


load_settings()
