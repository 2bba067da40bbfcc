from __future__ import annotations

import json
from pathlib import Path

import pytest

from prefloc import config, paths
from prefloc.models import Linemode, PatternLocation, SortBy, SortPref


def test_missing_config_gives_defaults(tmp_config_dir: Path) -> None:
    cfg = config.load_config()
    assert cfg.prefs == []
    assert cfg.disabled is False
    assert cfg.no_notify is False
    assert cfg.save_path == paths.default_save_path()


def test_prefs_are_marked_predefined(tmp_config_dir: Path) -> None:
    cfg = config.parse_config({
        "prefs": [
            {"location": ".*/Downloads", "sort": ["btime", {"reverse": True}], "linemode": "btime"},
            {"location": ".*", "show_hidden": False},
        ]
    })

    assert [r.location for r in cfg.prefs] == [PatternLocation(".*/Downloads"), PatternLocation(".*")]
    assert all(r.is_predefined for r in cfg.prefs)
    assert cfg.prefs[0].sort == SortPref(by=SortBy.BTIME, reverse=True)
    assert cfg.prefs[0].linemode == Linemode.BTIME
    assert cfg.prefs[1].show_hidden is False


def test_pref_without_location_is_an_error() -> None:
    with pytest.raises(config.ConfigError, match=r"prefs\[1\]"):
        config.parse_config({"prefs": [{"location": "/a"}, {"show_hidden": True}]})


def test_prefs_must_be_a_list() -> None:
    with pytest.raises(config.ConfigError):
        config.parse_config({"prefs": {"location": "/a"}})


def test_scalars_with_wrong_types_are_ignored() -> None:
    cfg = config.parse_config({"disabled": "yes", "no_notify": True, "save_path": 3})
    assert cfg.disabled is False
    assert cfg.no_notify is True
    assert cfg.save_path == paths.default_save_path()


def test_save_path_expands_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    cfg = config.parse_config({"save_path": "~/prefs.json"})
    assert cfg.save_path == tmp_path / "prefs.json"


def test_load_config_reads_file(tmp_config_dir: Path) -> None:
    tmp_config_dir.mkdir(parents=True)
    paths.CONFIG_FILE.write_text(json.dumps({"disabled": True, "save_path": str(tmp_config_dir / "p")}))

    cfg = config.load_config()

    assert cfg.disabled is True
    assert cfg.save_path == tmp_config_dir / "p"


def test_load_config_malformed_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{bad")
    with pytest.raises(config.ConfigError):
        config.load_config(path)


def test_load_config_non_utf8_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(b"\xff\xfe{}")
    with pytest.raises(config.ConfigError, match="Can't read config"):
        config.load_config(path)


def test_non_mapping_config_raises() -> None:
    with pytest.raises(config.ConfigError):
        config.parse_config(["prefs"])
