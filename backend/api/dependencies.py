"""
API Dependencies - Dependency injection for FastAPI

One AppState per process: every route shares the same coordinator, so
the connection state seen by one consumer is the state seen by all.
"""

from dataclasses import dataclass, field
from typing import Optional
import sys
import os
import threading

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import serial

from core.coordinator import ConnectionCoordinator
from core.protocol import ProtocolConfig
from core.serial_transport import SerialConfig
from core.settings_store import SettingsStore
from core.transport import MOCK_PORT, MockSerial
from controller import TiltController


def open_port_handle(port: str):
    """Unopened port handle: simulated device for 'mock', pyserial otherwise."""
    if port == MOCK_PORT:
        return MockSerial()
    return serial.Serial()


@dataclass
class AppState:
    """
    Application state container.

    Owns the single ConnectionCoordinator and the TiltController built on it.
    """
    settings: SettingsStore = field(default_factory=SettingsStore)
    serial_config: SerialConfig = field(default_factory=SerialConfig)
    protocol_config: ProtocolConfig = field(default_factory=ProtocolConfig)
    coordinator: ConnectionCoordinator = field(init=False)
    controller: TiltController = field(init=False)

    def __post_init__(self):
        self.coordinator = ConnectionCoordinator(
            serial_config=self.serial_config,
            protocol_config=self.protocol_config,
            serial_factory=open_port_handle,
        )
        self.controller = TiltController(self.coordinator, self.settings)

    @property
    def is_connected(self) -> bool:
        return self.coordinator.is_connected

    def shutdown(self) -> None:
        """Release the port."""
        self.coordinator.disconnect()


# Global instance
_app_state: Optional[AppState] = None
_app_state_lock = threading.Lock()


def get_app_state() -> AppState:
    """Get the global app state instance (created on first call)."""
    global _app_state
    if _app_state is None:
        # Routes run in a thread pool; only one of them may build the state
        with _app_state_lock:
            if _app_state is None:
                _app_state = AppState()
    return _app_state


def get_controller() -> TiltController:
    """Get the shared controller."""
    return get_app_state().controller


def require_connection() -> TiltController:
    """Get controller, raising error if not connected."""
    from fastapi import HTTPException

    ctrl = get_controller()
    if not ctrl.is_connected:
        raise HTTPException(status_code=400, detail="Not connected to EAT device")
    return ctrl
