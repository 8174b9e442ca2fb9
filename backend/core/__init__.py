"""Core infrastructure layer - serial transport, protocol, parsing, settings"""

from .serial_transport import SerialTransport, SerialConfig
from .protocol import CommandProtocol, ProtocolConfig
from .coordinator import ConnectionCoordinator
from .events import Event, EventBus, EventType
from .settings_store import SettingsStore, TiltSettings

__all__ = [
    'SerialTransport', 'SerialConfig',
    'CommandProtocol', 'ProtocolConfig',
    'ConnectionCoordinator',
    'Event', 'EventBus', 'EventType',
    'SettingsStore', 'TiltSettings',
]
