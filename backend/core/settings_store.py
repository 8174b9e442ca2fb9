"""
Settings Store - Single responsibility: persist and load user settings

Values are clamped to their allowed range on every set, the same way
whether they come from the API or from the JSON file.
"""

import json
import threading
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .logger import log_info, log_warn
from .serial_transport import DEFAULT_BAUD_RATE, SUPPORTED_BAUD_RATES


class ISettingsStore(Protocol):
    """Interface for settings storage"""

    def get(self, name: str) -> Any: ...
    def set(self, name: str, value: Any) -> Any: ...
    def save(self) -> bool: ...
    def load(self) -> "TiltSettings": ...


@dataclass
class TiltSettings:
    """User settings for the tilt device"""
    selected_port: str = ""
    baud_rate: int = DEFAULT_BAUD_RATE
    auto_connect_on_startup: bool = False
    command_timeout_ms: int = 3000
    quiet_period_ms: int = 500
    default_step_size: int = 25
    log_serial_traffic: bool = False
    motor_speed: int = 100
    motor_max_speed: int = 500
    motor_acceleration: int = 100
    orientation: int = 1


# (min, max) for integer settings
LIMITS = {
    "command_timeout_ms": (500, 30000),
    "quiet_period_ms": (50, 5000),
    "default_step_size": (1, 10000),
    "motor_speed": (1, 2000),
    "motor_max_speed": (1, 2000),
    "motor_acceleration": (1, 2000),
    "orientation": (1, 4),
}

FIELD_NAMES = tuple(f.name for f in fields(TiltSettings))


def _coerce(name: str, value: Any) -> Any:
    """Validate and clamp one setting value."""
    if name not in FIELD_NAMES:
        raise ValueError(f"Unknown setting: {name}")

    default = getattr(TiltSettings, name)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be true or false")
        return value
    if isinstance(default, str):
        return "" if value is None else str(value)

    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")

    if name == "baud_rate" and value not in SUPPORTED_BAUD_RATES:
        raise ValueError(f"Unsupported baud rate {value}")
    if name in LIMITS:
        low, high = LIMITS[name]
        value = max(low, min(high, value))
    return value


class SettingsStore:
    """Persists settings to a JSON file"""

    def __init__(self, file_path: Optional[Path] = None):
        self.file_path = file_path or Path(__file__).parent.parent / "eat_settings.json"
        self._lock = threading.Lock()
        self._data = TiltSettings()
        self.load()

    def load(self) -> TiltSettings:
        """(Re)load settings from file; defaults for anything missing or invalid"""
        settings = TiltSettings()
        if self.file_path.exists():
            try:
                with open(self.file_path, 'r') as f:
                    data = json.load(f)
                log_info(f"Loaded settings from {self.file_path}")
                if isinstance(data, dict):
                    for name in FIELD_NAMES:
                        if name in data:
                            try:
                                setattr(settings, name, _coerce(name, data[name]))
                            except ValueError as e:
                                log_warn(f"Ignoring saved setting: {e}")
            except (OSError, json.JSONDecodeError) as e:
                log_warn(f"Could not read settings from {self.file_path}: {e}")
        with self._lock:
            self._data = settings
        return replace(settings)

    def save(self) -> bool:
        """Save settings to file. Returns False if the file could not be written."""
        data = self.to_dict()
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            log_warn(f"Could not save settings to {self.file_path}: {e}")
            return False
        return True

    def get(self, name: str) -> Any:
        """Current value of one setting"""
        if name not in FIELD_NAMES:
            raise ValueError(f"Unknown setting: {name}")
        with self._lock:
            return getattr(self._data, name)

    def set(self, name: str, value: Any) -> Any:
        """Set one setting; returns the stored (clamped) value"""
        value = _coerce(name, value)
        with self._lock:
            setattr(self._data, name, value)
        return value

    def update(self, **values: Any) -> Dict[str, Any]:
        """Set several settings at once; nothing changes if any is invalid"""
        coerced = {name: _coerce(name, value) for name, value in values.items()}
        with self._lock:
            for name, value in coerced.items():
                setattr(self._data, name, value)
        return coerced

    def snapshot(self) -> TiltSettings:
        """Copy of all current settings"""
        with self._lock:
            return replace(self._data)

    def to_dict(self) -> Dict[str, Any]:
        """Export all settings as dict (for API and file)"""
        with self._lock:
            return asdict(self._data)
