"""Publish/subscribe relay between prefloc instances.

All instances sharing a ``Bus`` see each other's preference-table and
enabled/disabled changes. Delivery is synchronous on the publishing
caller's thread, last writer wins.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

LOG = logging.getLogger("prefloc.relay")

PREFS_CHANGED = "prefs_changed"
DISABLED_CHANGED = "disabled_changed"

Handler = Callable[["Message"], None]


@dataclass(frozen=True)
class Message:
    topic: str
    payload: Any
    sender: str


class Bus:
    """Topic-keyed channel. Emitters and subscribers don't know each other.

    A message is never delivered to the instance that sent it. A publish
    made from inside a handler is queued and delivered once the current
    one has reached every subscriber.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[tuple[str, Handler]]] = defaultdict(list)
        self._depth = 0
        self._deferred: list[tuple[Message, str | None]] = []

    def subscribe(self, topic: str, instance_id: str, handler: Handler) -> None:
        self._subscribers[topic].append((instance_id, handler))

    def unsubscribe(self, topic: str, instance_id: str) -> None:
        subs = self._subscribers.get(topic)
        if subs:
            self._subscribers[topic] = [s for s in subs if s[0] != instance_id]

    def publish(
        self, topic: str, payload: Any, sender: str, target: str | None = None
    ) -> None:
        message = Message(topic=topic, payload=payload, sender=sender)
        if self._depth > 0:
            self._deferred.append((message, target))
            return

        self._depth = 1
        try:
            self._deliver(message, target)
            while self._deferred:
                batch = self._deferred
                self._deferred = []
                for deferred, deferred_target in batch:
                    self._deliver(deferred, deferred_target)
        finally:
            self._depth = 0
            self._deferred = []

    def _deliver(self, message: Message, target: str | None) -> None:
        for instance_id, handler in list(self._subscribers.get(message.topic, [])):
            if instance_id == message.sender:
                continue
            if target is not None and instance_id != target:
                continue
            LOG.debug("%s -> %s: %s", message.sender, instance_id, message.topic)
            handler(message)


class Relay:
    """One instance's view of the bus."""

    def __init__(self, bus: Bus, instance_id: str) -> None:
        self.bus = bus
        self.instance_id = instance_id
        self._topics: set[str] = set()

    def broadcast(self, kind: str, payload: Any, target: str | None = None) -> None:
        self.bus.publish(kind, payload, self.instance_id, target=target)

    def listen(self, kind: str, handler: Handler) -> None:
        self.bus.subscribe(kind, self.instance_id, handler)
        self._topics.add(kind)

    def close(self) -> None:
        for topic in self._topics:
            self.bus.unsubscribe(topic, self.instance_id)
        self._topics.clear()
