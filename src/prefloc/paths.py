"""XDG Base Directory paths for prefloc config and saved preferences."""

from __future__ import annotations

import os
import platform
from pathlib import Path


def _xdg_config_home() -> Path:
    val = os.environ.get("XDG_CONFIG_HOME", "")
    if val and Path(val).is_absolute():
        return Path(val)
    return Path.home() / ".config"


def _appdata_dir() -> Path | None:
    val = os.environ.get("APPDATA", "")
    if val and Path(val).is_absolute():
        return Path(val)
    return None


def default_save_path() -> Path:
    """Where saved rules live when the config names no ``save_path``."""
    if platform.system() == "Windows":
        appdata = _appdata_dir()
        if appdata is not None:
            return appdata / "prefloc" / "pref-by-location"
    return _xdg_config_home() / "prefloc" / "pref-by-location"


CONFIG_DIR = _xdg_config_home() / "prefloc"
CONFIG_FILE = CONFIG_DIR / "config.json"
