"""Directory listing for the browser: scan, filter, sort, format."""

from __future__ import annotations

import os
import random
import re
import stat
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from prefloc.models import Linemode, SortBy, SortPref, ViewState

_NATURAL_SPLIT = re.compile(r"(\d+)")


@dataclass(frozen=True)
class Entry:
    name: str
    path: str
    is_dir: bool
    size: int = 0
    mtime: float = 0.0
    btime: float = 0.0
    mode: int = 0
    uid: int = 0

    @property
    def hidden(self) -> bool:
        return self.name.startswith(".")


def scan(path: str) -> list[Entry]:
    """List *path* in directory order. Unreadable entries are skipped."""
    entries = []
    try:
        it = os.scandir(path)
    except OSError:
        return []
    with it:
        for de in it:
            try:
                st = de.stat()
                is_dir = de.is_dir()
            except OSError:
                continue
            entries.append(
                Entry(
                    name=de.name,
                    path=de.path,
                    is_dir=is_dir,
                    size=st.st_size,
                    mtime=st.st_mtime,
                    btime=getattr(st, "st_birthtime", st.st_ctime),
                    mode=st.st_mode,
                    uid=st.st_uid,
                )
            )
    return entries


def _fold(name: str, sort: SortPref) -> str:
    if sort.translit:
        name = "".join(
            c for c in unicodedata.normalize("NFKD", name) if not unicodedata.combining(c)
        )
    if not sort.sensitive:
        name = name.lower()
    return name


def _natural_key(name: str) -> list:
    return [(0, int(part), "") if part.isdigit() else (1, 0, part) for part in _NATURAL_SPLIT.split(name)]


def sort_entries(entries: list[Entry], sort: SortPref) -> list[Entry]:
    by = sort.by
    if by == SortBy.NONE:
        out = list(entries)
    elif by == SortBy.RANDOM:
        out = list(entries)
        random.shuffle(out)
    elif by == SortBy.MTIME:
        out = sorted(entries, key=lambda e: e.mtime)
    elif by == SortBy.BTIME:
        out = sorted(entries, key=lambda e: e.btime)
    elif by == SortBy.SIZE:
        out = sorted(entries, key=lambda e: e.size)
    elif by == SortBy.EXTENSION:
        out = sorted(
            entries,
            key=lambda e: (_fold(Path(e.name).suffix, sort), _fold(e.name, sort)),
        )
    elif by == SortBy.NATURAL:
        out = sorted(entries, key=lambda e: _natural_key(_fold(e.name, sort)))
    else:
        out = sorted(entries, key=lambda e: _fold(e.name, sort))

    if sort.reverse:
        out.reverse()
    if sort.dir_first:
        # Stable: keeps the order chosen above within each group.
        out.sort(key=lambda e: not e.is_dir)
    return out


def visible_entries(entries: list[Entry], view: ViewState) -> list[Entry]:
    if not view.show_hidden:
        entries = [e for e in entries if not e.hidden]
    return sort_entries(entries, view.sort)


def _human_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "K", "M", "G", "T"):
        if value < 1024 or unit == "T":
            return f"{value:.0f}{unit}" if unit == "B" else f"{value:.1f}{unit}"
        value /= 1024
    return f"{size}B"


def _owner(uid: int) -> str:
    try:
        import pwd
    except ImportError:
        return str(uid)
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def linemode_text(entry: Entry, linemode: Linemode) -> str:
    """Format the extra column a linemode shows for *entry*."""
    if linemode == Linemode.SIZE:
        return "-" if entry.is_dir else _human_size(entry.size)
    if linemode == Linemode.MTIME:
        return datetime.fromtimestamp(entry.mtime).strftime("%Y-%m-%d %H:%M")
    if linemode == Linemode.BTIME:
        return datetime.fromtimestamp(entry.btime).strftime("%Y-%m-%d %H:%M")
    if linemode == Linemode.PERMISSIONS:
        return stat.filemode(entry.mode)
    if linemode == Linemode.OWNER:
        return _owner(entry.uid)
    return ""
