"""Host events and the synchronous dispatcher that routes them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NavigationChanged:
    """A tab's working directory changed."""

    tab: str
    path: str
    loading: bool = False


@dataclass(frozen=True)
class FolderLoaded:
    """A tab finished listing its directory."""

    tab: str
    path: str


@dataclass(frozen=True)
class ActionInvoked:
    action: str
    args: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RemoteMessageReceived:
    kind: str
    payload: Any
    sender: str


@dataclass(frozen=True)
class ProjectsLoaded:
    """A project-management plugin restored its tabs."""


Event = NavigationChanged | FolderLoaded | ActionInvoked | RemoteMessageReceived | ProjectsLoaded

EVENT_TYPES: tuple[type, ...] = (
    NavigationChanged,
    FolderLoaded,
    ActionInvoked,
    RemoteMessageReceived,
    ProjectsLoaded,
)


class Dispatcher:
    """Routes events to handlers registered per event type.

    Handlers run synchronously in registration order on the caller's
    thread.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = {t: [] for t in EVENT_TYPES}

    def register(self, event_type: type, handler: Callable[[Any], None]) -> None:
        if event_type not in self._handlers:
            raise ValueError(f"Unknown event type: {event_type.__name__}")
        self._handlers[event_type].append(handler)

    def dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(type(event))
        if handlers is None:
            raise ValueError(f"Unknown event type: {type(event).__name__}")
        for handler in list(handlers):
            handler(event)
