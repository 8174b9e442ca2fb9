"""
Connection coordinator - the one shared device connection.

Built once at startup and handed to every consumer, so all of them see
the same connection state. Consumers learn about changes by subscribing
to `events`.
"""

import threading
from typing import Callable, List, Optional, Union

from .events import Event, EventBus, EventType
from .protocol import CommandProtocol, ProtocolConfig
from .serial_transport import (
    DEFAULT_BAUD_RATE,
    SUPPORTED_BAUD_RATES,
    SerialConfig,
    SerialFactory,
    SerialTransport,
)
from .types import AnyCommand


class ConnectionCoordinator:
    """Owns the EventBus, SerialTransport and CommandProtocol for a process."""

    SUPPORTED_BAUD_RATES = SUPPORTED_BAUD_RATES

    def __init__(
        self,
        serial_config: Optional[SerialConfig] = None,
        protocol_config: Optional[ProtocolConfig] = None,
        serial_factory: Optional[SerialFactory] = None,
        events: Optional[EventBus] = None,
    ):
        self.events = events or EventBus()
        self.transport = SerialTransport(serial_config, self.events, serial_factory)
        self.protocol = CommandProtocol(self.transport, protocol_config, self.events)

    @staticmethod
    def list_ports() -> List[str]:
        return SerialTransport.list_ports()

    def connect(self, port: str, baud_rate: int = DEFAULT_BAUD_RATE) -> bool:
        return self.transport.connect(port, baud_rate)

    def disconnect(self) -> None:
        self.transport.disconnect()

    def send(
        self,
        command: Union[AnyCommand, str],
        timeout_ms: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        quiet_period_ms: Optional[int] = None,
    ) -> List[str]:
        return self.protocol.send(command, timeout_ms, cancel, quiet_period_ms)

    def send_no_wait(self, command: Union[AnyCommand, str]) -> bool:
        return self.protocol.send_no_wait(command)

    def subscribe(self, callback: Callable[[Event], None], *event_types: EventType) -> Callable[[], None]:
        return self.events.subscribe(callback, *event_types)

    @property
    def is_connected(self) -> bool:
        return self.transport.is_connected

    @property
    def port(self) -> str:
        return self.transport.port

    @property
    def baud_rate(self) -> int:
        return self.transport.baud_rate
