"""
Events - connection state, errors and received data

Consumers subscribe to an EventBus instead of polling. Every subscriber
sees the same events in the same order.
"""

from __future__ import annotations

import threading
from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .logger import log_warn


class EventType(Enum):
    """Kinds of notifications published by the serial layer"""

    CONNECTION_CHANGED = auto()
    ERROR = auto()
    DATA_RECEIVED = auto()


@dataclass(frozen=True)
class Event:
    """Event with optional data payload"""
    type: EventType
    data: Optional[Any] = None

    @classmethod
    def connection_changed(cls, connected: bool) -> 'Event':
        return cls(EventType.CONNECTION_CHANGED, data=connected)

    @classmethod
    def error(cls, error_msg: str) -> 'Event':
        return cls(EventType.ERROR, data=error_msg)

    @classmethod
    def data_received(cls, line: str) -> 'Event':
        return cls(EventType.DATA_RECEIVED, data=line)


Subscriber = Callable[[Event], None]


class EventBus:
    """
    Broadcast channel for serial-layer events.

    publish() delivers under a lock, so two threads publishing at once
    cannot hand subscribers the events in different orders.
    """

    def __init__(self):
        self._subscribers: List[Tuple[Subscriber, Tuple[EventType, ...]]] = []
        self._lock = threading.RLock()

    def subscribe(self, callback: Subscriber, *event_types: EventType) -> Callable[[], None]:
        """
        Register a callback for the given event types (all types if none).

        Returns a function that removes the subscription.
        """
        entry = (callback, tuple(event_types))
        with self._lock:
            self._subscribers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, event: Event) -> None:
        """Deliver an event to every matching subscriber."""
        with self._lock:
            for callback, types in list(self._subscribers):
                if types and event.type not in types:
                    continue
                try:
                    callback(event)
                except Exception as e:
                    log_warn(f"Event subscriber failed on {event.type.name}: {e}")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
