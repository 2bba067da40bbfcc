"""Persistence for location preference rules."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from prefloc.models import (
    Linemode,
    PreferenceRule,
    SortBy,
    SortPref,
    escape,
    parse_location,
)

LOG = logging.getLogger("prefloc.store")

_SORT_FLAGS = ("reverse", "dir_first", "translit", "sensitive")


class StoreError(Exception):
    """Base class for preference file failures."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


class PreferenceFileError(StoreError):
    """The preference file exists but can't be read or parsed."""


class DirectoryCreateError(StoreError):
    """The preference file's parent directory can't be created."""


class PreferenceWriteError(StoreError):
    """The preference file can't be written."""


def _sort_to_dict(sort: SortPref) -> dict:
    out: dict = {"by": sort.by.value}
    out.update(sort.flags())
    return out


def _dict_to_sort(data: object) -> SortPref | None:
    # Compact form from file-manager configs: ["mtime", {"reverse": true}]
    if isinstance(data, list):
        if not data:
            return None
        flags = data[1] if len(data) > 1 and isinstance(data[1], dict) else {}
        data = {"by": data[0], **flags}
    if not isinstance(data, dict):
        return None
    try:
        by = SortBy(data.get("by"))
    except ValueError:
        return None
    flags = {}
    for key in _SORT_FLAGS:
        value = data.get(key)
        if isinstance(value, bool):
            flags[key] = value
    return SortPref(by=by, **flags)


def rule_to_dict(rule: PreferenceRule) -> dict:
    """Serialize a rule for the preference file; ``is_predefined`` is never written."""
    out: dict = {"location": rule.location.pattern}
    if rule.sort is not None:
        out["sort"] = _sort_to_dict(rule.sort)
    if rule.linemode is not None:
        out["linemode"] = rule.linemode.value
    if rule.show_hidden is not None:
        out["show_hidden"] = rule.show_hidden
    return out


def dict_to_rule(data: object, *, is_predefined: bool = False) -> PreferenceRule | None:
    """Build a rule from a stored mapping, or None if it has no usable location.

    Unknown keys and invalid values are dropped.
    """
    if not isinstance(data, dict):
        return None
    location = data.get("location")
    if not isinstance(location, str) or not location:
        return None

    linemode = None
    if data.get("linemode") is not None:
        try:
            linemode = Linemode(data["linemode"])
        except ValueError:
            linemode = None

    show_hidden = data.get("show_hidden")
    if not isinstance(show_hidden, bool):
        show_hidden = None

    return PreferenceRule(
        location=parse_location(location),
        sort=_dict_to_sort(data.get("sort")),
        linemode=linemode,
        show_hidden=show_hidden,
        is_predefined=is_predefined,
    )


def rules_from_payload(payload: object) -> list[PreferenceRule]:
    """Convert a list of stored mappings into rules, skipping bad entries."""
    if not isinstance(payload, list):
        return []
    rules = []
    for idx, entry in enumerate(payload):
        rule = dict_to_rule(entry)
        if rule is None:
            LOG.debug("Skipping invalid rule at index %d: %r", idx, entry)
            continue
        rules.append(rule)
    return rules


def rules_to_payload(rules: list[PreferenceRule]) -> list[dict]:
    """Serialize the non-predefined rules, keeping their relative order."""
    return [rule_to_dict(r) for r in rules if not r.is_predefined]


def load_rules(path: Path) -> list[PreferenceRule]:
    """Load saved rules. A missing file is an empty table, not an error."""
    if not path.is_file():
        return []
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PreferenceFileError(f"Malformed preference file: {path} ({exc})", path) from exc
    except OSError as exc:
        raise PreferenceFileError(f"Can't read preference file: {path}", path) from exc
    if not isinstance(data, list):
        raise PreferenceFileError(f"Preference file is not a JSON array: {path}", path)
    return rules_from_payload(data)


def save_rules(rules: list[PreferenceRule], path: Path) -> None:
    """Write the non-predefined rules to *path*, creating parent dirs."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(f"Can't create folder to file: {path.parent}", path) from exc
    data = rules_to_payload(rules)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as exc:
        raise PreferenceWriteError(f"Can't write to file: {path}", path) from exc
    LOG.debug("Saved %d rules to %s", len(data), path)
