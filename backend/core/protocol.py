"""
Command protocol - one command in, every response line out.

The device never marks the end of a reply, it just stops talking. So a
reply is read until the line goes quiet:

  - the first read waits the full command timeout (a motor move can take
    a while before the first line appears),
  - every following read waits only the quiet period (multi-line blocks
    arrive as a fast burst),
  - the first read that times out ends the reply.

The caller always gets at least one line back. Failures come back as
synthetic lines, never as exceptions.
"""

import threading
from dataclasses import dataclass
from typing import List, Optional, Union

from .events import Event, EventBus
from .logger import log_critical, log_warn
from .serial_transport import ReadTimeout, SerialTransport, TransportError
from .types import AnyCommand, to_wire


NOT_CONNECTED_LINE = "[ERROR] Not connected to EAT device."
NO_RESPONSE_LINE = "[TIMEOUT] No response from device."
CANCELLED_LINE = "[CANCELLED] Command not sent."

DEFAULT_TIMEOUT_MS = 3000
DEFAULT_QUIET_PERIOD_MS = 500


@dataclass
class ProtocolConfig:
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    # Empirical: a burst slower than this gets truncated
    quiet_period_ms: int = DEFAULT_QUIET_PERIOD_MS


class CommandProtocol:
    """
    Read-until-quiet request/response on top of SerialTransport.

    send() holds the transport lock from the write until the reply has
    gone quiet, so concurrent callers are served strictly one at a time,
    in the order they get the lock.
    """

    def __init__(
        self,
        transport: SerialTransport,
        config: Optional[ProtocolConfig] = None,
        events: Optional[EventBus] = None,
    ):
        self.transport = transport
        self.config = config or ProtocolConfig()
        self.events = events or transport.events

    def send(
        self,
        command: Union[AnyCommand, str],
        timeout_ms: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        quiet_period_ms: Optional[int] = None,
    ) -> List[str]:
        """
        Send a command and collect its reply lines.

        `cancel` is only honoured before the command is written; once the
        device has the command it will act on it, so the reply is read
        to the end regardless.

        The connection is checked before the command is validated, so a
        disconnected send always returns the not-connected line.
        """
        if not self.transport.is_connected:
            return [NOT_CONNECTED_LINE]

        text = to_wire(command)
        first_wait = (timeout_ms if timeout_ms is not None else self.config.default_timeout_ms) / 1000
        quiet_wait = (quiet_period_ms if quiet_period_ms is not None else self.config.quiet_period_ms) / 1000

        if cancel is not None and cancel.is_set():
            return [CANCELLED_LINE]

        with self.transport.lock:
            if cancel is not None and cancel.is_set():
                return [CANCELLED_LINE]
            if not self.transport.is_connected:
                return [NOT_CONNECTED_LINE]

            try:
                self.transport.discard_input()
                self.transport.write_line(text)
                lines = self._read_until_quiet(first_wait, quiet_wait)
            except TransportError as e:
                return [self._fail(text, e)]

        if not lines:
            log_warn(f"No response to '{text}'")
            return [NO_RESPONSE_LINE]
        return lines

    def send_no_wait(self, command: Union[AnyCommand, str]) -> bool:
        """Fire-and-forget write. Returns False if it could not be sent."""
        if not self.transport.is_connected:
            return False
        text = to_wire(command)
        with self.transport.lock:
            if not self.transport.is_connected:
                return False
            try:
                self.transport.write_line(text)
            except TransportError as e:
                self._fail(text, e)
                return False
        return True

    def _read_until_quiet(self, first_wait: float, quiet_wait: float) -> List[str]:
        lines: List[str] = []
        wait = first_wait
        while True:
            try:
                line = self.transport.read_line(wait)
            except ReadTimeout:
                break
            if line:
                lines.append(line)
                self.events.publish(Event.data_received(line))
            wait = quiet_wait
        return lines

    def _fail(self, text: str, error: TransportError) -> str:
        """Hard I/O failure: notify, drop the connection, report as a line."""
        message = f"[ERROR] {error}"
        log_critical(f"Transport failure during '{text}': {error}")
        self.events.publish(Event.error(message))
        self.transport.disconnect()
        return message
