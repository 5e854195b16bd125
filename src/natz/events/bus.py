"""
Event bus for reconciliation events.

Reconcilers emit an event for every observable transition (synchronized,
failed, paused, deleted, propagated). Subscribers match event types with
glob-style patterns, e.g. ``account.*`` or ``*.failed``. Failures are
emitted as warnings.
"""

from __future__ import annotations

import fnmatch
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable


# Actions; event types are "<resource>.<action>", e.g. "account.synchronized"
ACTION_SYNCHRONIZED = "synchronized"
ACTION_FAILED = "failed"
ACTION_PAUSED = "paused"
ACTION_DELETED = "deleted"

# Propagation and secret events
EVENT_ACCOUNT_ACCESS_GRANTED = "account.access_granted"
EVENT_ACCOUNT_ACCESS_DELETED = "account.access_deleted"
EVENT_ACCOUNT_ACCESS_FAILED = "account.access_failed"
EVENT_USER_SECRET_CREATED = "user.secret_created"


def event_type(kind: str, action: str) -> str:
    """Build an event type from a resource kind, ``NatsAccount`` -> ``account.<action>``."""
    return f"{kind.removeprefix('Nats').lower()}.{action}"


@dataclass
class Event:
    """A reconciliation event about one resource.

    ``source`` is ``<Kind>/<namespace>/<name>`` of the resource concerned.
    """

    event_type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)
    warning: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: f"evt-{time.monotonic_ns()}")

    @property
    def kind(self) -> str:
        return self.source.split("/", 1)[0]


EventHandler = Callable[[Event], Any]


class EventBus(ABC):
    """Abstract base class for event bus implementations."""

    @abstractmethod
    def emit(self, event: Event) -> None:
        """Deliver an event to every subscriber whose pattern matches."""

    @abstractmethod
    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Subscribe a handler to events matching a glob-style pattern.

        Args:
            pattern: Glob-style pattern (e.g., ``account.*``, ``*``).
            handler: Callable invoked with the matching Event.
        """

    @abstractmethod
    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a handler from all subscriptions."""


class InMemoryEventBus(EventBus):
    """Synchronous in-process bus that also keeps the most recent events.

    Handlers run in the emitting pass; an exception raised by a handler
    reaches the emitter.
    """

    def __init__(self, history_size: int = 1000) -> None:
        self._subscriptions: list[tuple[str, EventHandler]] = []
        self._history: deque[Event] = deque(maxlen=history_size)

    def emit(self, event: Event) -> None:
        self._history.append(event)
        for pattern, handler in list(self._subscriptions):
            if fnmatch.fnmatch(event.event_type, pattern):
                handler(event)

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        self._subscriptions.append((pattern, handler))

    def unsubscribe(self, handler: EventHandler) -> None:
        self._subscriptions = [(p, h) for p, h in self._subscriptions if h != handler]

    def history(self, pattern: str = "*", warnings_only: bool = False) -> list[Event]:
        """Recent events matching ``pattern``, oldest first."""
        return [
            e
            for e in self._history
            if fnmatch.fnmatch(e.event_type, pattern) and (e.warning or not warnings_only)
        ]
