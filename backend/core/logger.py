"""
Structured logging for the EAT tilt controller.

Prefixes:
  ⚡ CRITICAL - Errors, failures
  ⚠️  WARN     - Warnings, unexpected behavior
  ✓  OK       - Success confirmations
  ⬡  SERIAL   - Raw serial I/O (only when traffic logging is enabled)
  🔌 CONN     - Connection lifecycle
  ↗  TILT     - Tilt / backfocus commands
  📍 POS      - Position readings
  💾 EEPROM   - EEPROM / motor configuration
"""

import sys
import threading
from enum import Enum
from typing import Optional, TextIO
from datetime import datetime


class LogLevel(Enum):
    CRITICAL = "⚡ CRITICAL"
    WARN = "⚠️  WARN    "
    OK = "✓  OK      "
    SERIAL = "⬡  SERIAL  "
    CONN = "🔌 CONN    "
    TILT = "↗  TILT    "
    POS = "📍 POS     "
    EEPROM = "💾 EEPROM  "
    INFO = "ℹ  INFO    "


_serial_logging = False
_output: Optional[TextIO] = None
_output_lock = threading.Lock()


def set_serial_logging(enabled: bool) -> None:
    """Turn raw serial traffic logging on or off."""
    global _serial_logging
    _serial_logging = enabled


def set_output(stream: Optional[TextIO]) -> None:
    """Redirect log lines. None goes back to stdout."""
    global _output
    _output = stream


def log(level: LogLevel, message: str, data: Optional[dict] = None):
    """Log a message with structured prefix."""
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    prefix = level.value

    line = f"[{timestamp}] {prefix} | {message}"
    if data:
        line += f" | {data}"

    # Serial, API and event threads all log; keep lines whole
    with _output_lock:
        print(line, file=_output or sys.stdout, flush=True)


# Convenience functions
def log_critical(msg: str, data: Optional[dict] = None):
    log(LogLevel.CRITICAL, msg, data)

def log_warn(msg: str, data: Optional[dict] = None):
    log(LogLevel.WARN, msg, data)

def log_ok(msg: str, data: Optional[dict] = None):
    log(LogLevel.OK, msg, data)

def log_serial(direction: str, data: str):
    """Log serial I/O. direction is '>>>' (send) or '<<<' (recv)"""
    if _serial_logging:
        log(LogLevel.SERIAL, f"{direction} {data}")

def log_conn(msg: str, data: Optional[dict] = None):
    log(LogLevel.CONN, msg, data)

def log_tilt(msg: str, data: Optional[dict] = None):
    log(LogLevel.TILT, msg, data)

def log_pos(msg: str, data: Optional[dict] = None):
    log(LogLevel.POS, msg, data)

def log_eeprom(msg: str, data: Optional[dict] = None):
    log(LogLevel.EEPROM, msg, data)

def log_info(msg: str, data: Optional[dict] = None):
    log(LogLevel.INFO, msg, data)
