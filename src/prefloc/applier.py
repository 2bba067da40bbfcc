"""Push a matched rule's view bundle into a host tab."""

from __future__ import annotations

import logging

from prefloc.host import Host
from prefloc.models import PreferenceRule

LOG = logging.getLogger("prefloc.applier")


class HoverMemory:
    """Remembers the hovered entry per tab across a hidden-files toggle.

    Showing or hiding dotfiles shifts the listing, so the cursor would land
    on a different entry once the folder reloads.
    """

    def __init__(self) -> None:
        self._pending: dict[str, str] = {}

    def remember(self, host: Host, tab: str) -> None:
        try:
            path = host.hovered(tab)
        except Exception as exc:
            LOG.debug("Could not read hovered entry for tab %s: %s", tab, exc)
            return
        if path:
            self._pending[tab] = path

    def pending(self, tab: str) -> str | None:
        return self._pending.get(tab)

    def restore(self, host: Host, tab: str) -> bool:
        """Hover the remembered entry again. Returns True if one was pending."""
        path = self._pending.pop(tab, None)
        if path is None:
            return False
        try:
            host.hover(tab, path)
        except Exception as exc:
            LOG.debug("Could not restore hover to %s in tab %s: %s", path, tab, exc)
        return True

    def forget(self, tab: str) -> None:
        self._pending.pop(tab, None)


def apply(
    rule: PreferenceRule,
    host: Host,
    tab: str,
    hover_memory: HoverMemory | None = None,
) -> None:
    """Issue a host command for every field *rule* sets. Absent fields stay as they are."""
    LOG.debug("Applying %s to tab %s", rule.location.pattern, tab)
    if rule.sort is not None:
        host.sort(tab, rule.sort)
    if rule.linemode is not None:
        host.linemode(tab, rule.linemode)
    if rule.show_hidden is not None:
        if hover_memory is not None and host.view_state(tab).show_hidden != rule.show_hidden:
            hover_memory.remember(host, tab)
        host.hidden(tab, rule.show_hidden)
