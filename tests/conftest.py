from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture()
def tmp_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    from prefloc import paths

    config_dir = tmp_path / "config" / "prefloc"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr(paths, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(paths, "CONFIG_FILE", config_dir / "config.json")
    return config_dir


@pytest.fixture()
def save_path(tmp_config_dir: Path) -> Path:
    return tmp_config_dir / "pref-by-location"
