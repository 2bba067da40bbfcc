"""Startup configuration for prefloc."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from prefloc import paths
from prefloc.models import PreferenceRule
from prefloc.store import dict_to_rule


class ConfigError(ValueError):
    """The configuration file or mapping is unusable."""


@dataclass
class PluginConfig:
    prefs: list[PreferenceRule] = field(default_factory=list)
    save_path: Path = field(default_factory=lambda: paths.default_save_path())
    disabled: bool = False
    no_notify: bool = False


def parse_config(data: object) -> PluginConfig:
    """Validate a raw configuration mapping.

    Unknown keys and wrongly typed scalars are ignored. Every entry of
    ``prefs`` must be a rule with a location, since silently dropping a
    rule the user wrote would change which rule wins.
    """
    config = PluginConfig()
    if data is None:
        return config
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    prefs = data.get("prefs", [])
    if not isinstance(prefs, list):
        raise ConfigError("'prefs' must be a list")
    for idx, entry in enumerate(prefs):
        rule = dict_to_rule(entry, is_predefined=True)
        if rule is None:
            raise ConfigError(f"prefs[{idx}] needs a string 'location'")
        config.prefs.append(rule)

    save_path = data.get("save_path")
    if isinstance(save_path, str) and save_path:
        config.save_path = Path(save_path).expanduser()

    for key in ("disabled", "no_notify"):
        value = data.get(key)
        if isinstance(value, bool):
            setattr(config, key, value)

    return config


def load_config(path: Path | None = None) -> PluginConfig:
    """Read configuration from *path* (default: the XDG config file)."""
    path = path or paths.CONFIG_FILE
    if not path.is_file():
        return PluginConfig()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        raise ConfigError(f"Can't read config {path}: {exc}") from exc
    return parse_config(data)
