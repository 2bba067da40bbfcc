from __future__ import annotations

from dataclasses import replace

from prefloc.host import Host
from prefloc.models import (
    Linemode,
    LiteralLocation,
    PatternLocation,
    PreferenceRule,
    SortBy,
    SortPref,
    ViewState,
)

DEFAULT_VIEW = ViewState(sort=SortPref(by=SortBy.ALPHABETICAL), linemode=Linemode.NONE, show_hidden=False)


class FakeHost(Host):
    """Records every command and keeps per-tab view state like a real host."""

    def __init__(self, cwd: str = "/home/user", view: ViewState = DEFAULT_VIEW) -> None:
        self.tab = "1"
        self.cwds: dict[str, str] = {self.tab: cwd}
        self.views: dict[str, ViewState] = {self.tab: view}
        self.hovers: dict[str, str | None] = {self.tab: None}
        self.commands: list[tuple] = []
        self.notifications: list[tuple[str, str]] = []
        self.fail_hover = False

    def active_tab(self) -> str:
        return self.tab

    def cwd(self, tab: str) -> str:
        return self.cwds[tab]

    def view_state(self, tab: str) -> ViewState:
        return self.views[tab]

    def hovered(self, tab: str) -> str | None:
        return self.hovers.get(tab)

    def sort(self, tab: str, sort: SortPref) -> None:
        self.commands.append(("sort", tab, sort))
        self.views[tab] = replace(self.views[tab], sort=sort)

    def linemode(self, tab: str, linemode: Linemode) -> None:
        self.commands.append(("linemode", tab, linemode))
        self.views[tab] = replace(self.views[tab], linemode=linemode)

    def hidden(self, tab: str, show: bool) -> None:
        self.commands.append(("hidden", tab, show))
        self.views[tab] = replace(self.views[tab], show_hidden=show)

    def hover(self, tab: str, path: str) -> None:
        if self.fail_hover:
            raise LookupError(path)
        self.commands.append(("hover", tab, path))
        self.hovers[tab] = path

    def notify(self, title, content, *, level="info", timeout=5.0) -> None:
        self.notifications.append((level, content))

    # test conveniences
    def go(self, path: str) -> None:
        self.cwds[self.tab] = path

    def set_view(self, **changes) -> None:
        self.views[self.tab] = replace(self.views[self.tab], **changes)

    def last(self, kind: str):
        for command in reversed(self.commands):
            if command[0] == kind:
                return command[2]
        return None


def make_rule(location: str = "/repo", *, literal: bool = True, **overrides) -> PreferenceRule:
    loc = LiteralLocation(location) if literal else PatternLocation(location)
    data = {
        "location": loc,
        "sort": None,
        "linemode": None,
        "show_hidden": None,
        "is_predefined": False,
    }
    data.update(overrides)
    return PreferenceRule(**data)
