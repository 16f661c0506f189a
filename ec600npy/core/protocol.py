"""
AT command protocol handler.

Runs one command exchange at a time: flush, write, settle, then collect
response lines until a sentinel or the line budget is reached.
"""

import logging
import threading
import time
from typing import Optional

from .transport import Transport
from ..exceptions import TransportError

logger = logging.getLogger(__name__)

# A response line containing either substring ends the exchange
RESPONSE_SENTINELS = ("OK", "ERROR")


class ATProtocol:
    """
    AT command protocol handler.

    Exchanges are serialized on a lock shared with every other reader of the
    transport (see CallMonitor), so a command never interleaves with another
    read on the same handle.
    """

    def __init__(
        self,
        transport: Transport,
        lock: Optional[threading.Lock] = None,
        settle_delay: float = 0.1,
        max_lines: int = 10,
        read_timeout: float = 1.0
    ) -> None:
        """
        Initialize AT protocol handler.

        Args:
            transport: Transport instance for communication
            lock: Transport lock shared with other readers (created if None)
            settle_delay: Seconds to wait after writing before reading
            max_lines: Maximum number of response lines to read
            read_timeout: Per-line read timeout in seconds
        """
        self.transport = transport
        self.lock = lock if lock is not None else threading.Lock()
        self.settle_delay = settle_delay
        self.max_lines = max_lines
        self.read_timeout = read_timeout

        logger.info("Initialized AT protocol handler")

    def send_command(self, cmd: str = "AT") -> str:
        """
        Send an AT command and collect the response text.

        The response is returned as-is, whether it ends in OK, ERROR, or
        neither; interpreting it is the caller's job.

        Args:
            cmd: AT command to send (e.g., "AT+CSQ" or "+CSQ")

        Returns:
            Accumulated raw response text (at most max_lines lines)

        Raises:
            TransportError: If flush, write or read fails
        """
        cmd = self._normalize_command(cmd)

        with self.lock:
            logger.debug(f"Sending AT command: {cmd.strip()}")

            # Drop stale bytes from a previous exchange
            self.transport.flush()

            written = self.transport.write(cmd.encode("utf-8"))
            if not written:
                raise TransportError(f"Failed to write AT command: {cmd.strip()}",
                                     command=cmd.strip())

            # The module needs time to start producing output
            time.sleep(self.settle_delay)

            response = self._read_response()

        logger.debug(f"Received response for {cmd.strip()}: {response!r}")
        return response

    def _read_response(self) -> str:
        """Read up to max_lines lines, stopping at the first sentinel line."""
        parts: list[str] = []

        for _ in range(self.max_lines):
            line_bytes = self.transport.read_line(timeout=self.read_timeout)
            if not line_bytes:
                break

            line = line_bytes.decode("utf-8", errors="ignore")
            parts.append(line)

            if any(sentinel in line for sentinel in RESPONSE_SENTINELS):
                break
        else:
            logger.debug(f"No sentinel within {self.max_lines} lines, returning partial response")

        return "".join(parts)

    def _normalize_command(self, cmd: str) -> str:
        """
        Normalize AT command format.

        Ensures command starts with "AT" and ends with "\\r\\n".
        """
        cmd = cmd.strip()

        # Add AT prefix if missing
        if not cmd.upper().startswith("AT"):
            cmd = "AT" + cmd

        return cmd + "\r\n"
