"""prefloc browse: Textual directory browser that remembers view preferences."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Header, Static

from prefloc.config import PluginConfig
from prefloc.host import NOTIFY_TIMEOUT, Host
from prefloc.listing import Entry, linemode_text, scan, visible_entries
from prefloc.models import Linemode, SortBy, SortPref, ViewState
from prefloc.relay import Bus, Relay
from prefloc.service import PrefService

LOG = logging.getLogger("prefloc.app")

TAB_ID = "0"

_SEVERITY = {"info": "information", "warning": "warning", "error": "error"}

SORT_CYCLE = [
    SortBy.ALPHABETICAL,
    SortBy.NATURAL,
    SortBy.EXTENSION,
    SortBy.SIZE,
    SortBy.MTIME,
    SortBy.BTIME,
    SortBy.NONE,
]
LINEMODE_CYCLE = list(Linemode)


@dataclass
class TabView:
    cwd: str
    view: ViewState


class Listing(DataTable):
    """Entries of the current directory."""

    BORDER_TITLE = "Files"


class BrowserHost(Host):
    """Host adapter over ``PrefBrowserApp``; the app has a single tab."""

    def __init__(self, app: PrefBrowserApp) -> None:
        self.app = app

    def active_tab(self) -> str:
        return TAB_ID

    def cwd(self, tab: str) -> str:
        return self.app.tab.cwd

    def view_state(self, tab: str) -> ViewState:
        return self.app.tab.view

    def hovered(self, tab: str) -> str | None:
        return self.app.hovered_path()

    def sort(self, tab: str, sort: SortPref) -> None:
        self.app.set_view(sort=sort)

    def linemode(self, tab: str, linemode: Linemode) -> None:
        self.app.set_view(linemode=linemode)

    def hidden(self, tab: str, show: bool) -> None:
        self.app.set_view(show_hidden=show)

    def hover(self, tab: str, path: str) -> None:
        self.app.hover_path(path)

    def notify(
        self,
        title: str,
        content: str,
        *,
        level: str = "info",
        timeout: float = NOTIFY_TIMEOUT,
    ) -> None:
        self.app.notify(
            content,
            title=title,
            severity=_SEVERITY.get(level, "information"),
            timeout=timeout,
        )


class PrefBrowserApp(App):
    """Main application."""

    TITLE = "prefloc"
    CSS = """
    Screen {
        layout: vertical;
    }

    #listing {
        height: 1fr;
        border: solid $accent;
    }

    #status-bar {
        height: 1;
        dock: bottom;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("l", "open", "Open", show=False),
        Binding("h", "parent", "Parent"),
        Binding("backspace", "parent", "Parent", show=False),
        Binding("full_stop", "toggle_hidden", "Hidden", key_display="."),
        Binding("s", "cycle_sort", "Sort"),
        Binding("r", "toggle_reverse", "Reverse"),
        Binding("m", "cycle_linemode", "Linemode"),
        Binding("S", "save_pref", "Save", key_display="S"),
        Binding("X", "reset_pref", "Reset", key_display="X"),
        Binding("P", "toggle_plugin", "On/Off", key_display="P"),
    ]

    def __init__(
        self,
        start_path: str | None = None,
        config: PluginConfig | None = None,
        bus: Bus | None = None,
    ) -> None:
        super().__init__()
        self.tab = TabView(
            cwd=os.path.abspath(start_path or os.getcwd()),
            view=ViewState(sort=SortPref(by=SortBy.ALPHABETICAL, dir_first=True)),
        )
        self._entries: list[Entry] = []
        self._columns_for: Linemode | None = None
        self._batching = False
        self._stale = False
        self.host = BrowserHost(self)
        self._config = config
        self._bus = bus
        self.service: PrefService | None = None
        self.status_text = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Listing(id="listing", cursor_type="row", zebra_stripes=True)
        yield Static("", id="status-bar")

    def on_mount(self) -> None:
        # Created once mounted so load errors can be shown as toasts.
        relay = Relay(self._bus, f"prefloc-{os.getpid()}-{id(self)}") if self._bus is not None else None
        self.service = PrefService(self.host, self._config, relay=relay)
        self.change_dir(self.tab.cwd)
        self.query_one("#listing", Listing).focus()

    def on_unmount(self) -> None:
        if self.service is not None:
            self.service.close()

    # -- listing -------------------------------------------------------------

    def change_dir(self, path: str) -> None:
        """Show *path*, then let the service apply the matching preferences."""
        path = os.path.abspath(path)
        if not os.path.isdir(path):
            LOG.debug("Refusing to open %s", path)
            self._set_status(f"Not a directory: {path}")
            return
        self.tab.cwd = path
        self._entries = scan(path)
        self._populate()
        if not self._run_service(self.service.navigate, TAB_ID, path):
            self.service.folder_loaded(TAB_ID, path)

    def set_view(self, **changes) -> None:
        self.tab.view = replace(self.tab.view, **changes)
        if self._batching:
            self._stale = True
        else:
            self._refresh_listing()

    def _run_service(self, method, *args) -> bool:
        """Call a service entry point, redrawing once for all the view commands it issues.

        Returns True if the listing was redrawn.
        """
        self._batching = True
        try:
            method(*args)
        finally:
            self._batching = False
        if not self._stale:
            return False
        self._refresh_listing()
        return True

    def _refresh_listing(self) -> None:
        self._populate()
        self.service.folder_loaded(TAB_ID, self.tab.cwd)

    def _populate(self) -> None:
        self._stale = False
        table = self.query_one("#listing", Listing)
        view = self.tab.view
        if self._columns_for != view.linemode:
            table.clear(columns=True)
            if view.linemode == Linemode.NONE:
                table.add_columns("Name")
            else:
                table.add_columns("Name", view.linemode.value)
            self._columns_for = view.linemode
        else:
            table.clear()

        for entry in visible_entries(self._entries, view):
            name = entry.name + ("/" if entry.is_dir else "")
            if view.linemode == Linemode.NONE:
                table.add_row(name, key=entry.path)
            else:
                table.add_row(name, linemode_text(entry, view.linemode), key=entry.path)

        self._refresh_status()

    def hovered_path(self) -> str | None:
        table = self.query_one("#listing", Listing)
        if table.row_count == 0:
            return None
        cell_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        return cell_key.row_key.value

    def hover_path(self, path: str) -> None:
        table = self.query_one("#listing", Listing)
        table.move_cursor(row=table.get_row_index(path))

    def _entry_for(self, path: str | None) -> Entry | None:
        for entry in self._entries:
            if entry.path == path:
                return entry
        return None

    # -- status ----------------------------------------------------------------

    def _set_status(self, text: str) -> None:
        self.status_text = text
        self.query_one("#status-bar", Static).update(text)

    def _refresh_status(self) -> None:
        view = self.tab.view
        sort = view.sort.by.value + (" (rev)" if view.sort.reverse else "")
        parts = [
            self.tab.cwd,
            f"sort:{sort}",
            f"linemode:{view.linemode.value}",
            "hidden:shown" if view.show_hidden else "hidden:off",
        ]
        if self.service.disabled:
            parts.append("prefloc:OFF")
        self._set_status(" · ".join(parts))

    # -- actions -----------------------------------------------------------------

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        entry = self._entry_for(event.row_key.value)
        if entry is not None and entry.is_dir:
            self.change_dir(entry.path)

    def action_open(self) -> None:
        entry = self._entry_for(self.hovered_path())
        if entry is not None and entry.is_dir:
            self.change_dir(entry.path)

    def action_parent(self) -> None:
        parent = str(Path(self.tab.cwd).parent)
        if parent != self.tab.cwd:
            self.change_dir(parent)

    def action_toggle_hidden(self) -> None:
        self.set_view(show_hidden=not self.tab.view.show_hidden)

    def action_cycle_sort(self) -> None:
        current = self.tab.view.sort
        idx = SORT_CYCLE.index(current.by) if current.by in SORT_CYCLE else -1
        self.set_view(sort=replace(current, by=SORT_CYCLE[(idx + 1) % len(SORT_CYCLE)]))

    def action_toggle_reverse(self) -> None:
        current = self.tab.view.sort
        self.set_view(sort=replace(current, reverse=not current.reverse))

    def action_cycle_linemode(self) -> None:
        idx = LINEMODE_CYCLE.index(self.tab.view.linemode)
        self.set_view(linemode=LINEMODE_CYCLE[(idx + 1) % len(LINEMODE_CYCLE)])

    def action_save_pref(self) -> None:
        self._run_service(self.service.invoke, "save")

    def action_reset_pref(self) -> None:
        self._run_service(self.service.invoke, "reset")

    def action_toggle_plugin(self) -> None:
        self._run_service(self.service.invoke, "toggle")
        self._refresh_status()


def tui_main(start_path: str | None = None, config: PluginConfig | None = None) -> None:
    app = PrefBrowserApp(start_path, config)
    app.run()


if __name__ == "__main__":
    tui_main()
