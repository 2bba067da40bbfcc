"""The preference-by-location service one host instance runs.

Navigation events pick the first matching rule and push its view bundle
into the tab. Actions save or reset the rule for the current directory,
or switch the service on and off. Every table or enabled-state change is
broadcast to sibling instances over the relay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from prefloc.applier import HoverMemory, apply
from prefloc.config import PluginConfig
from prefloc.events import (
    ActionInvoked,
    Dispatcher,
    FolderLoaded,
    NavigationChanged,
    ProjectsLoaded,
    RemoteMessageReceived,
)
from prefloc.host import NOTIFY_TITLE, Host
from prefloc.matcher import match, remove_saved
from prefloc.models import FALLBACK_LOCATION, LiteralLocation, PreferenceRule
from prefloc.relay import DISABLED_CHANGED, PREFS_CHANGED, Message, Relay
from prefloc.store import (
    PreferenceFileError,
    StoreError,
    load_rules,
    rules_from_payload,
    rules_to_payload,
    save_rules,
)

LOG = logging.getLogger("prefloc.service")


@dataclass
class ServiceState:
    save_path: Path
    predefined: list[PreferenceRule] = field(default_factory=list)
    rules: list[PreferenceRule] = field(default_factory=list)
    fallback: PreferenceRule | None = None
    disabled: bool = False
    no_notify: bool = False
    loaded: bool = False
    hover: HoverMemory = field(default_factory=HoverMemory)


class PrefService:
    """Applies and records view preferences for one host."""

    def __init__(
        self,
        host: Host,
        config: PluginConfig | None = None,
        relay: Relay | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        config = config or PluginConfig()
        self.host = host
        self.relay = relay
        self.dispatcher = dispatcher or Dispatcher()
        self.state = ServiceState(
            save_path=config.save_path,
            predefined=[r.predefined() for r in config.prefs],
            disabled=config.disabled,
            no_notify=config.no_notify,
        )

        self.dispatcher.register(NavigationChanged, self.on_navigation)
        self.dispatcher.register(FolderLoaded, self.on_folder_loaded)
        self.dispatcher.register(ActionInvoked, self.on_action)
        self.dispatcher.register(RemoteMessageReceived, self.on_remote)
        self.dispatcher.register(ProjectsLoaded, self.on_projects_loaded)

        if self.relay is not None:
            for kind in (PREFS_CHANGED, DISABLED_CHANGED):
                self.relay.listen(kind, self._forward_remote)

        self.reload()

    # -- host-facing entry points ----------------------------------------

    def navigate(self, tab: str, path: str, loading: bool = False) -> None:
        self.dispatcher.dispatch(NavigationChanged(tab=tab, path=path, loading=loading))

    def folder_loaded(self, tab: str, path: str) -> None:
        self.dispatcher.dispatch(FolderLoaded(tab=tab, path=path))

    def invoke(self, action: str, *args: str) -> None:
        self.dispatcher.dispatch(ActionInvoked(action=action, args=args))

    def projects_loaded(self) -> None:
        self.dispatcher.dispatch(ProjectsLoaded())

    def close(self) -> None:
        if self.relay is not None:
            self.relay.close()

    @property
    def rules(self) -> list[PreferenceRule]:
        return list(self.state.rules)

    @property
    def disabled(self) -> bool:
        return self.state.disabled

    # -- table -------------------------------------------------------------

    def reload(self) -> None:
        """Rebuild the table: saved rules, then predefined ones, then the fallback."""
        try:
            saved = load_rules(self.state.save_path)
        except PreferenceFileError as exc:
            LOG.debug("Load failed: %s", exc)
            self._notify(str(exc), level="error")
            saved = []
        self._set_saved(saved)

    def _set_saved(self, saved: list[PreferenceRule]) -> None:
        rules = [r for r in saved if not r.is_predefined]
        rules.extend(self.state.predefined)
        if self.state.fallback is not None:
            rules.append(self.state.fallback)
        self.state.rules = rules

    def _persist(self) -> bool:
        try:
            save_rules(self.state.rules, self.state.save_path)
        except StoreError as exc:
            self._notify(str(exc), level="error")
            return False
        return True

    def _broadcast_rules(self) -> None:
        if self.relay is not None:
            self.relay.broadcast(PREFS_CHANGED, rules_to_payload(self.state.rules))

    # -- applying ----------------------------------------------------------

    def apply_current(
        self,
        tab: str | None = None,
        path: str | None = None,
        *,
        track_hover: bool = True,
    ) -> PreferenceRule | None:
        """Apply the first matching rule to *tab* (default: the active tab)."""
        if self.state.disabled:
            return None
        tab = tab or self.host.active_tab()
        path = path if path is not None else self.host.cwd(tab)
        rule = match(self.state.rules, path)
        if rule is None:
            LOG.debug("No rule matches %s", path)
            return None
        apply(rule, self.host, tab, self.state.hover if track_hover else None)
        return rule

    def _ensure_fallback(self, tab: str) -> None:
        # The first view the host shows carries its configured defaults.
        if self.state.loaded:
            return
        self.state.loaded = True
        self.state.fallback = PreferenceRule.from_view(
            FALLBACK_LOCATION, self.host.view_state(tab), is_predefined=True
        )
        self.state.rules.append(self.state.fallback)

    # -- handlers ------------------------------------------------------------

    def on_navigation(self, event: NavigationChanged) -> None:
        self._ensure_fallback(event.tab)
        # Nothing is hovered yet while the folder is still listing.
        self.apply_current(event.tab, event.path, track_hover=not event.loading)

    def on_folder_loaded(self, event: FolderLoaded) -> None:
        if self.state.hover.pending(event.tab) is not None:
            self.invoke("restore-hover", event.tab)

    def on_projects_loaded(self, _event: ProjectsLoaded) -> None:
        self.apply_current()

    def on_action(self, event: ActionInvoked) -> None:
        action = event.action
        if action == "save":
            self.save()
        elif action == "reset":
            self.reset()
        elif action == "toggle":
            self.set_disabled(not self.state.disabled)
        elif action == "disable":
            self.set_disabled(True)
        elif action == "enable":
            self.set_disabled(False)
        elif action == "restore-hover":
            tab = event.args[0] if event.args else self.host.active_tab()
            self.state.hover.restore(self.host, tab)
        else:
            self._notify(f"Unknown action: {action}", level="warning")

    def on_remote(self, event: RemoteMessageReceived) -> None:
        if event.kind == PREFS_CHANGED:
            self._set_saved(rules_from_payload(event.payload))
            self.apply_current()
        elif event.kind == DISABLED_CHANGED:
            if isinstance(event.payload, bool):
                self.set_disabled(event.payload, broadcast=False)
        else:
            LOG.debug("Ignoring remote message %s from %s", event.kind, event.sender)

    def _forward_remote(self, message: Message) -> None:
        self.dispatcher.dispatch(
            RemoteMessageReceived(kind=message.topic, payload=message.payload, sender=message.sender)
        )

    # -- actions -------------------------------------------------------------

    def save(self) -> None:
        """Record the active tab's view bundle for its directory."""
        if self.state.disabled:
            self._notify("Disabled, preference not saved", level="warning")
            return
        tab = self.host.active_tab()
        cwd = self.host.cwd(tab)
        rule = PreferenceRule.from_view(LiteralLocation(cwd), self.host.view_state(tab))

        remove_saved(self.state.rules, cwd)
        self.state.rules.insert(0, rule)

        # The table keeps the change even if the write fails.
        saved = self._persist()
        self._broadcast_rules()
        if saved:
            self._notify(f"Saved preference for {cwd}")

    def reset(self) -> None:
        """Forget the saved rule for the active directory."""
        if self.state.disabled:
            self._notify("Disabled, nothing reset", level="warning")
            return
        tab = self.host.active_tab()
        cwd = self.host.cwd(tab)
        if not remove_saved(self.state.rules, cwd):
            self._notify(f"No saved preference for {cwd}")
            return

        saved = self._persist()
        self._broadcast_rules()
        self.apply_current(tab, cwd)
        if saved:
            self._notify(f"Reset preference for {cwd}")

    def set_disabled(self, disabled: bool, *, broadcast: bool = True) -> None:
        was_disabled = self.state.disabled
        self.state.disabled = disabled
        if was_disabled == disabled:
            return
        if broadcast and self.relay is not None:
            self.relay.broadcast(DISABLED_CHANGED, disabled)
        if disabled:
            if broadcast:
                self._notify("Disabled")
            return
        self.reload()
        self.apply_current()
        if broadcast:
            self._notify("Enabled")

    def _notify(self, content: str, level: str = "info") -> None:
        if level == "info" and self.state.no_notify:
            return
        self.host.notify(NOTIFY_TITLE, content, level=level)
