"""
Unit tests for the event bus.
"""

import threading

from core.events import Event, EventBus, EventType


class TestEventBus:
    """Subscription and delivery."""

    def test_all_types_by_default(self):
        bus = EventBus()
        seen = []
        bus.subscribe(seen.append)

        bus.publish(Event.connection_changed(True))
        bus.publish(Event.error("boom"))

        assert [e.type for e in seen] == [EventType.CONNECTION_CHANGED, EventType.ERROR]

    def test_filtered_subscription(self):
        bus = EventBus()
        errors = []
        bus.subscribe(errors.append, EventType.ERROR)

        bus.publish(Event.data_received("line"))
        bus.publish(Event.error("boom"))

        assert [e.data for e in errors] == ["boom"]

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        unsubscribe = bus.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        bus.publish(Event.error("boom"))

        assert seen == []
        assert bus.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self):
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        bus.subscribe(broken)
        bus.subscribe(seen.append)
        bus.publish(Event.error("boom"))

        assert len(seen) == 1

    def test_same_order_for_every_subscriber(self):
        bus = EventBus()
        first, second = [], []
        bus.subscribe(first.append)
        bus.subscribe(second.append)

        def publisher(prefix):
            for i in range(50):
                bus.publish(Event.data_received(f"{prefix}{i}"))

        threads = [threading.Thread(target=publisher, args=(p,)) for p in "ab"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(first) == 100
        assert first == second


class TestEvent:
    """Factory helpers."""

    def test_payloads(self):
        assert Event.connection_changed(False).data is False
        assert Event.error("x") == Event(EventType.ERROR, "x")
        assert Event.data_received("FW: V7").type == EventType.DATA_RECEIVED
