"""Settings and YAML config loading."""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Any, Callable

import yaml

DEFAULT_CMD = "dmenu"
DEFAULT_TODO_DIR = Path("todo")
CONFIG_FILE_NAME = "config.yaml"


@dataclass(frozen=True, slots=True)
class Settings:
    cmd: str = DEFAULT_CMD
    opts: str = ""
    todo_dir: Path = DEFAULT_TODO_DIR
    show_created_date: bool = True
    threshold: bool = False


SETTING_TYPES: dict[str, type] = {
    "cmd": str,
    "opts": str,
    "todo_dir": str,
    "show_created_date": bool,
    "threshold": bool,
}


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / "todocalmenu" / CONFIG_FILE_NAME


def read_config(path: Path, warn: Callable[[str], None] | None = None) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception:
        if warn is not None:
            warn(f"Unable to parse config at {path}. Falling back to defaults.")
        return {}
    if not isinstance(payload, dict):
        if warn is not None:
            warn(f"Invalid config format at {path}. Falling back to defaults.")
        return {}
    return payload


def resolve_settings(
    path: Path,
    warn: Callable[[str], None] | None = None,
) -> Settings:
    data = read_config(path, warn=warn)
    for key in data.keys():
        if key != "settings" and warn is not None:
            warn(f"Unsupported config key '{key}' in {path}. Ignoring.")

    section = data.get("settings", {})
    if not isinstance(section, dict):
        if warn is not None:
            warn(f"Invalid settings section in {path}. Using defaults.")
        return Settings()

    values: dict[str, Any] = {}
    for key, value in section.items():
        expected = SETTING_TYPES.get(key)
        if expected is None:
            if warn is not None:
                warn(f"Unsupported settings key '{key}' in {path}. Ignoring.")
            continue
        if value is None:
            continue
        if not isinstance(value, expected):
            if warn is not None:
                warn(f"Invalid settings.{key} in {path}. Using default.")
            continue
        values[key] = value

    if "todo_dir" in values:
        values["todo_dir"] = Path(values["todo_dir"]).expanduser()
    return Settings(**values)


def apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Return ``settings`` with every non-None override applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(settings, **changes)
