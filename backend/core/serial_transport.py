"""
Serial Transport - Single responsibility: serial communication

Owns the one port handle. Thread-safe: every method runs under a single
re-entrant lock, which CommandProtocol also holds for a whole
write-then-read exchange.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

import serial
import serial.tools.list_ports

from .events import Event, EventBus
from .logger import log_conn, log_critical, log_ok, log_serial, log_warn


SUPPORTED_BAUD_RATES = (9600, 19200, 38400, 57600, 115200)
DEFAULT_BAUD_RATE = 9600
DEFAULT_TIMEOUT = 3.0


class ReadTimeout(TimeoutError):
    """No complete line arrived within the read window."""


class TransportError(Exception):
    """I/O failure on an established connection (cable pulled, device reset)."""


class ISerialTransport(Protocol):
    """Interface for serial communication"""

    def connect(self, port: str, baud_rate: int = DEFAULT_BAUD_RATE) -> bool: ...
    def disconnect(self) -> None: ...
    def write_line(self, text: str) -> None: ...
    def read_line(self, timeout: float) -> str: ...
    def discard_input(self) -> None: ...
    @property
    def is_connected(self) -> bool: ...


@dataclass
class SerialConfig:
    timeout: float = DEFAULT_TIMEOUT
    write_timeout: float = DEFAULT_TIMEOUT
    settle_delay: float = 2.0  # Device reboots on DTR toggle and prints a banner


# Returns an unopened pyserial-compatible handle for a port name
SerialFactory = Callable[[str], serial.Serial]


def _default_factory(port: str) -> serial.Serial:
    return serial.Serial()


class SerialTransport:
    """
    Handles raw line I/O with the tilt device.

    connect() never raises: failures come back as False plus an error
    event. Once connected, I/O failures raise TransportError and timeouts
    raise ReadTimeout.
    """

    def __init__(
        self,
        config: Optional[SerialConfig] = None,
        events: Optional[EventBus] = None,
        serial_factory: Optional[SerialFactory] = None,
    ):
        self.config = config or SerialConfig()
        self.events = events or EventBus()
        self._serial_factory = serial_factory or _default_factory
        self._serial: Optional[serial.Serial] = None
        self._port = ""
        self._baud_rate = 0
        self._partial = b""
        self.lock = threading.RLock()

    @staticmethod
    def list_ports() -> List[str]:
        """List available serial ports, sorted"""
        try:
            ports = serial.tools.list_ports.comports()
        except OSError as e:
            log_warn(f"Port enumeration failed: {e}")
            return []
        return sorted(port.device for port in ports)

    # === Connection lifecycle ===

    def connect(self, port: str, baud_rate: int = DEFAULT_BAUD_RATE) -> bool:
        """Open the port, wait for the device to boot, drop its banner."""
        with self.lock:
            self.disconnect()

            if baud_rate not in SUPPORTED_BAUD_RATES:
                return self._connect_failed(f"Unsupported baud rate {baud_rate}")

            log_conn(f"Connecting to {port} @ {baud_rate}")
            handle = None
            try:
                handle = self._serial_factory(port)
                handle.port = port
                handle.baudrate = baud_rate
                handle.bytesize = serial.EIGHTBITS
                handle.parity = serial.PARITY_NONE
                handle.stopbits = serial.STOPBITS_ONE
                handle.xonxoff = False
                handle.rtscts = False
                handle.dsrdtr = False
                handle.timeout = self.config.timeout
                handle.write_timeout = self.config.write_timeout
                # DTR high on open pulses the reset line
                handle.dtr = True
                handle.rts = False
                handle.open()

                time.sleep(self.config.settle_delay)
                handle.reset_input_buffer()
            except (serial.SerialException, OSError, ValueError) as e:
                self._close_quietly(handle)
                return self._connect_failed(f"Connection failed: {e}")

            self._serial = handle
            self._port = port
            self._baud_rate = baud_rate
            self._partial = b""
            log_ok(f"Connected to {port} @ {baud_rate}")
            self.events.publish(Event.connection_changed(True))
            return True

    def disconnect(self) -> None:
        """Close the port. Safe to call when already closed."""
        with self.lock:
            if self._serial is None:
                return
            handle, port = self._serial, self._port
            self._serial = None
            self._port = ""
            self._baud_rate = 0
            self._partial = b""
            self._close_quietly(handle)
            log_conn(f"Disconnected from {port}")
            self.events.publish(Event.connection_changed(False))

    def _connect_failed(self, message: str) -> bool:
        log_critical(message)
        self.events.publish(Event.error(message))
        self.events.publish(Event.connection_changed(False))
        return False

    @staticmethod
    def _close_quietly(handle: Optional[serial.Serial]) -> None:
        """Best-effort buffer discard and close."""
        if handle is None:
            return
        try:
            if handle.is_open:
                handle.reset_input_buffer()
                handle.reset_output_buffer()
            handle.close()
        except (serial.SerialException, OSError) as e:
            log_warn(f"Error while closing port: {e}")

    # === Line I/O ===

    def _require_open(self) -> serial.Serial:
        if self._serial is None:
            raise TransportError("Not connected")
        return self._serial

    def write_line(self, text: str) -> None:
        """Write one newline-terminated line"""
        with self.lock:
            handle = self._require_open()
            line = text.strip()
            log_serial(">>>", line)
            try:
                handle.write(f"{line}\n".encode("ascii"))
                handle.flush()
            except (serial.SerialException, OSError) as e:
                raise TransportError(f"Write failed: {e}") from e

    def read_line(self, timeout: float) -> str:
        """
        Read one line, waiting at most `timeout` seconds.

        Raises ReadTimeout if no line terminator arrived in time. Bytes of
        an unfinished line are kept for the next call.
        """
        with self.lock:
            handle = self._require_open()
            try:
                handle.timeout = timeout
                raw = handle.readline()
            except (serial.SerialException, OSError) as e:
                raise TransportError(f"Read failed: {e}") from e

            if not raw.endswith(b"\n"):
                self._partial += raw
                raise ReadTimeout(f"No line within {timeout:.3f}s")

            raw, self._partial = self._partial + raw, b""
            line = raw.decode("ascii", errors="replace").strip()
            if line:
                log_serial("<<<", line)
            return line

    def discard_input(self) -> None:
        """Drop anything buffered from the device"""
        with self.lock:
            handle = self._require_open()
            self._partial = b""
            try:
                handle.reset_input_buffer()
            except (serial.SerialException, OSError) as e:
                raise TransportError(f"Buffer reset failed: {e}") from e

    # === State ===

    @property
    def is_connected(self) -> bool:
        handle = self._serial
        return handle is not None and handle.is_open

    @property
    def port(self) -> str:
        return self._port

    @property
    def baud_rate(self) -> int:
        return self._baud_rate
