"""
Simulated EAT device for running without hardware.

MockSerial looks like an unopened pyserial `Serial` to SerialTransport
and answers the wire protocol the way firmware V7 does:

  tr,s  TR +s, BL -s        tp,s  TL +s, TR +s, BL -s, BR -s
  tl,s  TL +s, BR -s        bt,s  TL -s, TR -s, BL +s, BR +s
  br,s  BR +s, TL -s        rt,s  TR +s, BR +s, BL -s, TL -s
  bl,s  BL +s, TR -s        lt,s  TL +s, BL +s, TR -s, BR -s
  bf,s  all +s              zr    all to 0

Moves reply with a status line and '***finished movement***'.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

import serial

from .parser import (
    EEPROM_END,
    EEPROM_START,
    FINISHED_MOVEMENT,
    POSITIONS_END,
    POSITIONS_START,
)


MOCK_PORT = "mock"
FIRMWARE_VERSION = "V7.0-sim"

MOTOR_ORDER = ("TL", "TR", "BL", "BR")

# Per-step sign for each motor, per move opcode
MOVES: Dict[str, Dict[str, int]] = {
    "tr": {"TR": 1, "BL": -1},
    "tl": {"TL": 1, "BR": -1},
    "br": {"BR": 1, "TL": -1},
    "bl": {"BL": 1, "TR": -1},
    "tp": {"TL": 1, "TR": 1, "BL": -1, "BR": -1},
    "bt": {"TL": -1, "TR": -1, "BL": 1, "BR": 1},
    "rt": {"TR": 1, "BR": 1, "BL": -1, "TL": -1},
    "lt": {"TL": 1, "BL": 1, "TR": -1, "BR": -1},
    "bf": {"TL": 1, "TR": 1, "BL": 1, "BR": 1},
}

CONFIG_KEYS = {"cA": "Speed", "cB": "MaxSpeed", "cC": "Acceleration"}


class MockSerial:
    """
    In-process stand-in for serial.Serial wired to a simulated device.

    readline() never blocks: with nothing queued it returns b"" at once,
    which is what a real port returns when its timeout expires.
    """

    def __init__(self, read_delay: float = 0.0, fail_open: bool = False):
        # pyserial attributes SerialTransport configures
        self.port: Optional[str] = None
        self.baudrate = 9600
        self.bytesize = serial.EIGHTBITS
        self.parity = serial.PARITY_NONE
        self.stopbits = serial.STOPBITS_ONE
        self.xonxoff = False
        self.rtscts = False
        self.dsrdtr = False
        self.timeout: Optional[float] = None
        self.write_timeout: Optional[float] = None
        self.dtr = False
        self.rts = False

        self.read_delay = read_delay
        self.fail_open = fail_open
        self.is_open = False

        self.positions: Dict[str, int] = {motor: 0 for motor in MOTOR_ORDER}
        self.eeprom: Dict[str, int] = {
            "TL": 0, "TR": 0, "BL": 0, "BR": 0,
            "Speed": 100, "MaxSpeed": 500, "Acceleration": 100,
            "Orientation": 1,
        }
        self.sent_commands: List[str] = []
        # ("write", text) / ("quiet", None) in the order they happened
        self.io_log: List[Tuple[str, Optional[str]]] = []
        self._output: Deque[bytes] = deque()

    # === pyserial surface ===

    def open(self) -> None:
        if self.fail_open:
            raise serial.SerialException(f"could not open port {self.port}")
        self.is_open = True
        self._output.append(b"ASG EAT firmware " + FIRMWARE_VERSION.encode() + b" ready\n")

    def close(self) -> None:
        self.is_open = False

    def write(self, data: bytes) -> int:
        self._require_open()
        for text in data.decode("ascii").splitlines():
            text = text.strip()
            if text:
                self.sent_commands.append(text)
                self.io_log.append(("write", text))
                for line in self.respond(text):
                    self._output.append(f"{line}\r\n".encode("ascii"))
        return len(data)

    def flush(self) -> None:
        pass

    def readline(self) -> bytes:
        self._require_open()
        if self.read_delay:
            time.sleep(self.read_delay)
        if self._output:
            return self._output.popleft()
        self.io_log.append(("quiet", None))
        return b""

    def reset_input_buffer(self) -> None:
        self._output.clear()

    def reset_output_buffer(self) -> None:
        pass

    @property
    def in_waiting(self) -> int:
        return sum(len(chunk) for chunk in self._output)

    def _require_open(self) -> None:
        if not self.is_open:
            raise serial.PortNotOpenError()

    # === Simulated firmware ===

    def respond(self, text: str) -> List[str]:
        """Reply lines for one command line"""
        opcode, _, arg = text.partition(",")
        opcode = opcode.strip()
        value = self._int_arg(arg)

        if opcode in MOVES:
            if value is None:
                return [f"Invalid steps for {opcode}"]
            for motor, sign in MOVES[opcode].items():
                self.positions[motor] += sign * value
            return [f"Moving {opcode.upper()} {value}", FINISHED_MOVEMENT]

        if opcode == "zr":
            self.positions = {motor: 0 for motor in MOTOR_ORDER}
            return ["Zeroing all axes", FINISHED_MOVEMENT]

        if opcode == "cp":
            return [POSITIONS_START] + [str(self.positions[m]) for m in MOTOR_ORDER] + [POSITIONS_END]

        if opcode == "ep":
            return [EEPROM_START] + [f"{key}: {val}" for key, val in self.eeprom.items()] + [EEPROM_END]

        if opcode == "up":
            self.eeprom.update(self.positions)
            return ["Positions saved to EEPROM"]

        if opcode in CONFIG_KEYS:
            if value is None:
                return [f"Invalid value for {opcode}"]
            self.eeprom[CONFIG_KEYS[opcode]] = value
            return [f"{CONFIG_KEYS[opcode]} set to {value}"]

        if opcode == "or":
            if value not in (1, 2, 3, 4):
                return ["Invalid orientation"]
            self.eeprom["Orientation"] = value
            return [f"Orientation set to {value}"]

        if opcode in ("m1", "m2", "m3", "m4"):
            if value is None:
                return [f"Invalid position for {opcode}"]
            motor = MOTOR_ORDER[int(opcode[1]) - 1]
            self.positions[motor] = value
            return [f"{motor} set to {value}"]

        if opcode == "fv":
            return [f"FW: {FIRMWARE_VERSION}"]

        return [f"Unknown command: {text}"]

    @staticmethod
    def _int_arg(arg: str) -> Optional[int]:
        try:
            return int(arg.strip())
        except ValueError:
            return None
