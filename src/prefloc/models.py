"""Data models for prefloc."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from functools import lru_cache

LOG = logging.getLogger("prefloc.models")


class SortBy(Enum):
    NONE = "none"
    MTIME = "mtime"
    BTIME = "btime"
    EXTENSION = "extension"
    ALPHABETICAL = "alphabetical"
    NATURAL = "natural"
    SIZE = "size"
    RANDOM = "random"


class Linemode(Enum):
    NONE = "none"
    SIZE = "size"
    BTIME = "btime"
    MTIME = "mtime"
    PERMISSIONS = "permissions"
    OWNER = "owner"


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern | None:
    try:
        return re.compile(f"(?:{pattern})\\Z")
    except re.error as exc:
        LOG.debug("Ignoring invalid location pattern %r: %s", pattern, exc)
        return None


def escape(path: str) -> str:
    """Escape regex metacharacters so *path* matches only itself."""
    return re.escape(path)


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text, flags=re.DOTALL)


@dataclass(frozen=True)
class LiteralLocation:
    """A directory path taken literally (saved from the current cwd)."""

    path: str

    @property
    def pattern(self) -> str:
        return escape(self.path)

    def matches(self, path: str) -> bool:
        return path.endswith(self.path)


@dataclass(frozen=True)
class PatternLocation:
    """A user-supplied regular expression matched against the path's end."""

    regex: str

    @property
    def pattern(self) -> str:
        return self.regex

    def matches(self, path: str) -> bool:
        compiled = _compile(self.regex)
        return compiled is not None and compiled.search(path) is not None


Location = LiteralLocation | PatternLocation

FALLBACK_LOCATION = PatternLocation(".*")


def parse_location(text: str) -> Location:
    """Turn a stored location string back into its tagged form.

    A string that is exactly the escaped form of some path round-trips as
    a literal; anything else is kept as a pattern.
    """
    unescaped = _unescape(text)
    if escape(unescaped) == text:
        return LiteralLocation(unescaped)
    return PatternLocation(text)


@dataclass(frozen=True)
class SortPref:
    by: SortBy = SortBy.ALPHABETICAL
    reverse: bool | None = None
    dir_first: bool | None = None
    translit: bool | None = None
    sensitive: bool | None = None

    def flags(self) -> dict[str, bool]:
        """Return only the flags that are set."""
        out = {}
        for key in ("reverse", "dir_first", "translit", "sensitive"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class ViewState:
    """The view bundle a tab currently shows."""

    sort: SortPref
    linemode: Linemode = Linemode.NONE
    show_hidden: bool = False


@dataclass(frozen=True)
class PreferenceRule:
    location: Location
    sort: SortPref | None = None
    linemode: Linemode | None = None
    show_hidden: bool | None = None
    is_predefined: bool = False

    @classmethod
    def from_view(
        cls, location: Location, view: ViewState, *, is_predefined: bool = False
    ) -> PreferenceRule:
        return cls(
            location=location,
            sort=view.sort,
            linemode=view.linemode,
            show_hidden=view.show_hidden,
            is_predefined=is_predefined,
        )

    def predefined(self) -> PreferenceRule:
        return replace(self, is_predefined=True)

    def matches(self, path: str) -> bool:
        return self.location.matches(path)
