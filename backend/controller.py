"""
Tilt Controller - Main facade for the system.

Provides a simple API for driving the tilt device in screen terms.
Every command is remapped through the orientation held in the settings
store, which is read fresh on each call because another consumer may
change it at any time.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional, Union

from core.coordinator import ConnectionCoordinator
from core.events import Event, EventType
from core.logger import log_conn, log_eeprom, log_ok, log_pos, log_tilt, log_warn, set_serial_logging
from core.orientation import display_positions, map_corner, map_direction
from core.parser import parse_response, update_motor_config
from core.settings_store import SettingsStore
from core.types import (
    AnyCommand,
    Backfocus,
    Corner,
    CornerTilt,
    Direction,
    DirectionalTilt,
    MotorConfig,
    MotorParameter,
    PositionSnapshot,
    QueryEeprom,
    QueryFirmware,
    QueryPositions,
    RawCommand,
    SavePositions,
    SetMotorConfig,
    SetMotorPosition,
    SetOrientation,
    ZeroAll,
    validate_orientation,
)

HISTORY_LIMIT = 500

SETTINGS_FIELD = {
    MotorParameter.SPEED: "motor_speed",
    MotorParameter.MAX_SPEED: "motor_max_speed",
    MotorParameter.ACCELERATION: "motor_acceleration",
}


@dataclass
class CommandRecord:
    """
    One command and everything the device said back.

    Kept in a bounded history for the activity log.
    """
    command: str
    lines: List[str]
    timestamp: datetime = field(default_factory=datetime.now)
    finished_movement: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "lines": list(self.lines),
            "timestamp": self.timestamp.isoformat(),
            "finished_movement": self.finished_movement,
        }

    def __str__(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] >> {self.command} << {' | '.join(self.lines)}"


class TiltController:
    """
    Main controller for the tilt device.

    Provides a high-level API for:
    - Connection (with saved port / baud fallback)
    - Directional, corner and backfocus tilts in screen orientation
    - Positions, EEPROM, motor configuration, firmware queries
    - Status and command history
    """

    def __init__(self, coordinator: ConnectionCoordinator, settings: SettingsStore):
        self._coordinator = coordinator
        self._settings = settings
        self._positions = PositionSnapshot()
        self._motor_config = MotorConfig()
        self._firmware_version: Optional[str] = None
        self._last_response: List[str] = []
        self._history: Deque[CommandRecord] = deque(maxlen=HISTORY_LIMIT)
        self._state_lock = threading.Lock()
        self._busy = 0

        set_serial_logging(settings.get("log_serial_traffic"))
        self._unsubscribe = coordinator.subscribe(self._on_connection_changed, EventType.CONNECTION_CHANGED)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def coordinator(self) -> ConnectionCoordinator:
        return self._coordinator

    @property
    def settings(self) -> SettingsStore:
        return self._settings

    @property
    def is_connected(self) -> bool:
        return self._coordinator.is_connected

    @property
    def positions(self) -> PositionSnapshot:
        """Last-known physical motor positions."""
        return self._positions

    @property
    def motor_config(self) -> MotorConfig:
        """Motor configuration as last read from EEPROM."""
        return self._motor_config

    @property
    def is_moving(self) -> bool:
        """True while a command is in flight."""
        return self._busy > 0

    @property
    def last_response(self) -> List[str]:
        return list(self._last_response)

    @property
    def connection_status(self) -> str:
        if self.is_connected:
            return f"Connected to {self._coordinator.port} @ {self._coordinator.baud_rate}"
        return "Disconnected"

    # =========================================================================
    # Connection
    # =========================================================================

    def connect(self, port: Optional[str] = None, baud_rate: Optional[int] = None) -> bool:
        """
        Connect to the device.

        Falls back to the saved port and baud rate. On success the choice
        is saved, then positions and motor configuration are read back.
        """
        port = port or self._settings.get("selected_port")
        baud_rate = baud_rate or self._settings.get("baud_rate")
        if not port:
            log_warn("No port selected")
            return False

        if not self._coordinator.connect(port, baud_rate):
            return False

        self._settings.update(selected_port=port, baud_rate=baud_rate)
        self._settings.save()

        self.query_positions()
        self.read_eeprom()
        return True

    def disconnect(self) -> None:
        """Close the connection. Positions go back to unknown."""
        self._coordinator.disconnect()

    def try_auto_connect(self) -> bool:
        """Connect with saved settings if auto-connect is enabled."""
        if self._settings.get("auto_connect_on_startup") and self._settings.get("selected_port"):
            log_conn("Auto-connecting with saved settings")
            return self.connect()
        return False

    def _on_connection_changed(self, event: Event) -> None:
        if not event.data:
            with self._state_lock:
                self._positions = PositionSnapshot()

    # =========================================================================
    # Motion (screen orientation)
    # =========================================================================

    def tilt(self, direction: Union[Direction, str], steps: Optional[int] = None) -> CommandRecord:
        """Tilt toward a screen direction (moves all 4 motors)."""
        steps = self._steps(steps)
        orientation = self._settings.get("orientation")
        physical = map_direction(direction, orientation)
        log_tilt(f"Tilt {Direction.parse(direction).name} {steps} -> {physical.value} (orientation {orientation})")
        return self._execute(DirectionalTilt(physical, steps))

    def tilt_corner(self, corner: Union[Corner, str], steps: Optional[int] = None) -> CommandRecord:
        """Tilt a screen corner (moves 2 motors in opposition)."""
        steps = self._steps(steps)
        orientation = self._settings.get("orientation")
        physical = map_corner(corner, orientation)
        log_tilt(f"Corner {Corner.parse(corner).name} {steps} -> {physical.value} (orientation {orientation})")
        return self._execute(CornerTilt(physical, steps))

    def backfocus(self, steps: Optional[int] = None) -> CommandRecord:
        """Move all 4 motors together. Negative steps move out."""
        steps = self._steps(steps)
        log_tilt(f"Backfocus {steps}")
        return self._execute(Backfocus(steps))

    def zero(self) -> CommandRecord:
        """Zero all axes."""
        log_tilt("Zero all axes")
        return self._execute(ZeroAll())

    def set_motor_position(self, motor: int, position: int) -> CommandRecord:
        """Force-set one motor's absolute position."""
        return self._execute(SetMotorPosition(motor, position))

    # =========================================================================
    # Queries & configuration
    # =========================================================================

    def query_positions(self) -> PositionSnapshot:
        """Ask the device for positions. Keeps the old snapshot if the reply is malformed."""
        self._execute(QueryPositions())
        return self._positions

    def save_positions(self) -> CommandRecord:
        """Persist current positions to device EEPROM."""
        return self._execute(SavePositions())

    def read_eeprom(self) -> MotorConfig:
        """Read motor configuration from EEPROM and mirror it into settings."""
        self._execute(QueryEeprom())
        config = self._motor_config
        for name, value in config.to_dict().items():
            if value is not None:
                self._settings.set(f"motor_{name}", value)
        return config

    def set_motor_config(self, parameter: Union[MotorParameter, str], value: int) -> CommandRecord:
        """
        Send speed / max speed / acceleration to the device.

        If not connected, connects with the saved port for this one
        command and disconnects again afterwards.
        """
        command = SetMotorConfig(parameter, value)
        stored = self._settings.set(SETTINGS_FIELD[command.parameter], value)
        self._settings.save()

        was_connected = self.is_connected
        if not was_connected:
            port = self._settings.get("selected_port")
            if not port or not self._coordinator.connect(port, self._settings.get("baud_rate")):
                log_warn(f"Could not connect to send {command.to_wire()}")
                return CommandRecord(command=command.to_wire(), lines=["[ERROR] Failed to connect to device."])

        try:
            record = self._execute(SetMotorConfig(command.parameter, stored))
        finally:
            if not was_connected:
                self._coordinator.disconnect()

        self._motor_config = self._motor_config.with_value(command.parameter, stored)
        log_eeprom(f"{command.parameter.name} set to {stored}")
        return record

    def set_orientation(self, orientation: int) -> Optional[CommandRecord]:
        """Store the orientation and, when connected, tell the device."""
        orientation = validate_orientation(orientation)
        self._settings.set("orientation", orientation)
        self._settings.save()
        log_ok(f"Orientation set to {orientation}")
        if not self.is_connected:
            return None
        return self._execute(SetOrientation(orientation))

    def firmware_version(self) -> Optional[str]:
        """Query the firmware version string."""
        self._execute(QueryFirmware())
        return self._firmware_version

    def send_raw(self, text: str) -> CommandRecord:
        """Send operator-typed text as is."""
        return self._execute(RawCommand(text))

    # =========================================================================
    # Status & History
    # =========================================================================

    def display_positions(self) -> Dict[str, str]:
        """Positions labelled by screen corner for the current orientation."""
        return display_positions(self._positions, self._settings.get("orientation"))

    def get_status(self) -> Dict[str, Any]:
        """Get current controller status."""
        return {
            "connected": self.is_connected,
            "port": self._coordinator.port,
            "baud_rate": self._coordinator.baud_rate,
            "status": self.connection_status,
            "is_moving": self.is_moving,
            "orientation": self._settings.get("orientation"),
            "positions": self._positions.to_dict(),
            "display_positions": self.display_positions(),
            "motor_config": self._motor_config.to_dict(),
            "firmware_version": self._firmware_version,
            "last_response": self.last_response,
        }

    def get_command_history(self, limit: Optional[int] = None) -> List[CommandRecord]:
        """Get command history, oldest first."""
        history = list(self._history)
        if limit is None:
            return history
        return history[-limit:] if limit > 0 else []

    def clear_history(self) -> None:
        self._history.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _steps(self, steps: Optional[int]) -> int:
        return self._settings.get("default_step_size") if steps is None else steps

    def _execute(self, command: AnyCommand) -> CommandRecord:
        """Send one command, fold its reply into state and record it."""
        wire = command.to_wire()
        with self._state_lock:
            self._busy += 1
        try:
            lines = self._coordinator.send(
                command,
                timeout_ms=self._settings.get("command_timeout_ms"),
                quiet_period_ms=self._settings.get("quiet_period_ms"),
            )
        finally:
            with self._state_lock:
                self._busy -= 1

        parsed = parse_response(lines)
        if parsed.positions is not None:
            # A disconnect since the reply arrived has already reset the snapshot
            with self._state_lock:
                applied = self.is_connected
                if applied:
                    self._positions = PositionSnapshot.from_values(parsed.positions)
            if applied:
                log_pos("Positions", self._positions.to_dict())
        if parsed.eeprom:
            self._motor_config = update_motor_config(self._motor_config, lines)
            log_eeprom("Motor configuration", self._motor_config.to_dict())
        if parsed.firmware_version is not None:
            self._firmware_version = parsed.firmware_version

        record = CommandRecord(command=wire, lines=lines, finished_movement=parsed.finished_movement)
        self._last_response = lines
        self._history.append(record)
        return record
