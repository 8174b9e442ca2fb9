"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.coordinator import ConnectionCoordinator
from core.serial_transport import SerialConfig
from core.settings_store import SettingsStore
from core.transport import MockSerial


class ScriptedSerial(MockSerial):
    """
    MockSerial with canned replies per command line.

    Records the timeout in force for every readline() so tests can check
    the first-read / quiet-period split.
    """

    def __init__(self, replies=None, **kwargs):
        super().__init__(**kwargs)
        self.replies = replies or {}
        self.read_timeouts = []
        self.read_error = None
        self.write_error = None

    def respond(self, text):
        return list(self.replies.get(text, []))

    def write(self, data):
        if self.write_error is not None:
            raise self.write_error
        return super().write(data)

    def readline(self):
        self.read_timeouts.append(self.timeout)
        if self.read_error is not None:
            raise self.read_error
        return super().readline()


@pytest.fixture
def fast_serial_config() -> SerialConfig:
    """No device settle delay."""
    return SerialConfig(settle_delay=0)


@pytest.fixture
def settings(tmp_path) -> SettingsStore:
    """Settings store backed by a temp file."""
    return SettingsStore(tmp_path / "eat_settings.json")


@pytest.fixture
def mock_device() -> MockSerial:
    """Simulated EAT device."""
    return MockSerial()


@pytest.fixture
def coordinator(mock_device, fast_serial_config) -> ConnectionCoordinator:
    """Coordinator whose every port opens the simulated device."""
    return ConnectionCoordinator(
        serial_config=fast_serial_config,
        serial_factory=lambda port: mock_device,
    )


@pytest.fixture
def scripted():
    """Factory for ScriptedSerial devices."""
    def make(replies=None, **kwargs) -> ScriptedSerial:
        return ScriptedSerial(replies, **kwargs)
    return make
