"""File manager host interface.

The host owns tabs and their views; prefloc only reads the current view
bundle and asks the host to change it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from prefloc.models import Linemode, SortPref, ViewState

NOTIFY_TITLE = "Preference by location"
NOTIFY_TIMEOUT = 5.0


class Host(ABC):
    """Base class for file manager front ends."""

    @abstractmethod
    def active_tab(self) -> str:
        """Return the id of the tab that has focus."""

    @abstractmethod
    def cwd(self, tab: str) -> str:
        """Return the directory shown by *tab*."""

    @abstractmethod
    def view_state(self, tab: str) -> ViewState:
        """Return the sort/linemode/hidden bundle *tab* currently uses."""

    @abstractmethod
    def hovered(self, tab: str) -> str | None:
        """Return the path under the cursor in *tab*, if any."""

    @abstractmethod
    def sort(self, tab: str, sort: SortPref) -> None: ...

    @abstractmethod
    def linemode(self, tab: str, linemode: Linemode) -> None: ...

    @abstractmethod
    def hidden(self, tab: str, show: bool) -> None: ...

    @abstractmethod
    def hover(self, tab: str, path: str) -> None: ...

    @abstractmethod
    def notify(
        self,
        title: str,
        content: str,
        *,
        level: str = "info",
        timeout: float = NOTIFY_TIMEOUT,
    ) -> None:
        """Show a non-blocking message. *level* is info, warning or error."""
