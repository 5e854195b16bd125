"""Tests for the event bus."""

from __future__ import annotations

from natz.events import (
    ACTION_FAILED,
    ACTION_SYNCHRONIZED,
    Event,
    EventBus,
    InMemoryEventBus,
    event_type,
)


class TestEvent:
    """Tests for the Event dataclass."""

    def test_event_creation(self) -> None:
        """Event creates with required fields and sensible defaults."""
        event = Event(event_type="account.synchronized", source="NatsAccount/default/acct")
        assert event.event_type == "account.synchronized"
        assert event.source == "NatsAccount/default/acct"
        assert event.payload == {}
        assert event.timestamp is not None
        assert event.event_id.startswith("evt-")

    def test_event_with_payload(self) -> None:
        event = Event(
            event_type="account.failed",
            source="NatsAccount/default/acct",
            payload={"error": "boom", "failures": 2},
        )
        assert event.payload["failures"] == 2


class TestEventType:
    def test_kind_prefix_is_dropped(self) -> None:
        assert event_type("NatsAccount", ACTION_SYNCHRONIZED) == "account.synchronized"
        assert event_type("NatsKey", ACTION_FAILED) == "key.failed"
        assert event_type("NatsActivation", "paused") == "activation.paused"


class TestInMemoryEventBus:
    """Tests for the synchronous in-process event bus."""

    def test_is_an_event_bus(self) -> None:
        assert isinstance(InMemoryEventBus(), EventBus)

    def test_emit_and_subscribe(self) -> None:
        bus = InMemoryEventBus()
        received: list[Event] = []
        bus.subscribe("account.*", received.append)

        event = Event(event_type="account.synchronized", source="a")
        bus.emit(event)

        assert received == [event]

    def test_pattern_matching_glob(self) -> None:
        """Glob-style patterns correctly filter events."""
        bus = InMemoryEventBus()
        accounts: list[Event] = []
        failures: list[Event] = []
        everything: list[Event] = []

        bus.subscribe("account.*", accounts.append)
        bus.subscribe("*.failed", failures.append)
        bus.subscribe("*", everything.append)

        bus.emit(Event(event_type="account.synchronized", source="a"))
        bus.emit(Event(event_type="user.failed", source="b"))
        bus.emit(Event(event_type="key.deleted", source="c"))

        assert len(accounts) == 1
        assert len(failures) == 1
        assert len(everything) == 3

    def test_unsubscribe(self) -> None:
        bus = InMemoryEventBus()
        received: list[Event] = []
        bus.subscribe("*", received.append)
        bus.subscribe("account.*", received.append)
        bus.unsubscribe(received.append)

        bus.emit(Event(event_type="account.synchronized", source="a"))

        assert received == []

    def test_history(self) -> None:
        bus = InMemoryEventBus(history_size=2)
        bus.emit(Event(event_type="key.synchronized", source="NatsKey/default/k"))
        bus.emit(Event(event_type="account.failed", source="NatsAccount/default/a", warning=True))
        bus.emit(Event(event_type="account.synchronized", source="NatsAccount/default/a"))

        assert [e.event_type for e in bus.history()] == ["account.failed", "account.synchronized"]
        assert [e.event_type for e in bus.history("account.*", warnings_only=True)] == ["account.failed"]
        assert bus.history()[0].kind == "NatsAccount"
