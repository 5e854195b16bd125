"""Event bus for reconciliation events."""

from .bus import (
    ACTION_DELETED,
    ACTION_FAILED,
    ACTION_PAUSED,
    ACTION_SYNCHRONIZED,
    EVENT_ACCOUNT_ACCESS_DELETED,
    EVENT_ACCOUNT_ACCESS_FAILED,
    EVENT_ACCOUNT_ACCESS_GRANTED,
    EVENT_USER_SECRET_CREATED,
    Event,
    EventBus,
    EventHandler,
    InMemoryEventBus,
    event_type,
)

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
    "event_type",
    "ACTION_SYNCHRONIZED",
    "ACTION_FAILED",
    "ACTION_PAUSED",
    "ACTION_DELETED",
    "EVENT_ACCOUNT_ACCESS_GRANTED",
    "EVENT_ACCOUNT_ACCESS_DELETED",
    "EVENT_ACCOUNT_ACCESS_FAILED",
    "EVENT_USER_SECRET_CREATED",
]
