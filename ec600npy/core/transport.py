"""
Transport layer abstraction for modem communication.

Provides abstractions for serial communication with dependency injection support.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import ClassVar, Deque, Optional
import serial
from serial import SerialException

from ..exceptions import TransportError, DeviceDisconnectedError

logger = logging.getLogger(__name__)

# Substrings of pyserial error messages that mean the device went away
_DISCONNECT_PHRASES = (
    "device disconnected",
    "device reports readiness to read but returned no data",
    "no such device",
    "device not configured",
    "input/output error",
)


class Transport(ABC):
    """Abstract base class for modem transport."""

    @abstractmethod
    def open(self) -> None:
        """
        Open the underlying connection.

        Raises:
            TransportError: If the connection cannot be opened
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Discard unread input."""
        pass

    @abstractmethod
    def write(self, data: bytes) -> int:
        """
        Write data to the transport.

        Args:
            data: Bytes to write

        Returns:
            Number of bytes written

        Raises:
            TransportError: If write fails
        """
        pass

    @abstractmethod
    def read_line(self, timeout: Optional[float] = None) -> bytes:
        """
        Read one line, including its terminator.

        Args:
            timeout: Optional timeout in seconds

        Returns:
            Bytes read, or b"" if nothing arrived before the timeout

        Raises:
            TransportError: If read fails
        """
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if transport is open."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the transport."""
        pass


class SerialTransport(Transport):
    """
    Serial port transport implementation.

    Only one SerialTransport per device path may be open in a process.
    """

    _open_ports: ClassVar[set[str]] = set()
    _registry_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        timeout: float = 1.0
    ) -> None:
        """
        Initialize serial transport. The port is opened by open().

        Args:
            port: Serial port path (e.g., /dev/ttyUSB0)
            baudrate: Baud rate for serial communication
            timeout: Default read timeout in seconds
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._serial: Optional[serial.Serial] = None

    def open(self) -> None:
        """Open the serial port, failing fast if the path is already open."""
        with self._registry_lock:
            if self.port in self._open_ports:
                logger.error(f"Serial port {self.port} is already open")
                raise TransportError(f"Serial port {self.port} is already open")

            try:
                self._serial = serial.Serial(
                    port=self.port,
                    baudrate=self.baudrate,
                    timeout=self.timeout
                )
            except SerialException as e:
                logger.error(f"Failed to open serial port {self.port}: {e}")
                raise TransportError(f"Failed to open serial port {self.port}: {e}") from e

            self._open_ports.add(self.port)

        logger.info(f"Opened serial port {self.port} at {self.baudrate} baud")

    def _require_open(self) -> serial.Serial:
        if self._serial is None or not self._serial.is_open:
            raise TransportError(f"Serial port {self.port} is not open")
        return self._serial

    def flush(self) -> None:
        """Clear the serial input buffer."""
        port = self._require_open()
        try:
            port.reset_input_buffer()
            logger.debug("Reset input buffer")
        except SerialException as e:
            logger.error(f"Failed to reset input buffer: {e}")
            raise self._translate(e, "Failed to reset input buffer") from e

    def write(self, data: bytes) -> int:
        """Write data to serial port."""
        port = self._require_open()
        try:
            written = port.write(data)
            logger.debug(f"Wrote {written} bytes: {data}")
            return written
        except SerialException as e:
            logger.error(f"Serial write failed: {e}")
            raise self._translate(e, "Serial write failed") from e

    def read_line(self, timeout: Optional[float] = None) -> bytes:
        """Read from serial port until LF or timeout."""
        port = self._require_open()
        try:
            # Temporarily change timeout if specified
            original_timeout = None
            if timeout is not None:
                original_timeout = port.timeout
                port.timeout = timeout

            try:
                data = port.read_until(b"\n")
            finally:
                if original_timeout is not None:
                    port.timeout = original_timeout

            if data:
                logger.debug(f"Read {len(data)} bytes: {data}")

            return data
        except SerialException as e:
            logger.error(f"Serial read failed: {e}")
            raise self._translate(e, "Serial read failed") from e

    @staticmethod
    def _translate(error: SerialException, message: str) -> TransportError:
        """Map a pyserial error to DeviceDisconnectedError or TransportError."""
        error_str = str(error).lower()
        if any(phrase in error_str for phrase in _DISCONNECT_PHRASES):
            return DeviceDisconnectedError(
                f"Serial device disconnected: {error}",
                response=str(error)
            )
        return TransportError(f"{message}: {error}")

    def is_open(self) -> bool:
        """Check if serial port is open."""
        return bool(self._serial and self._serial.is_open)

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            if self._serial.is_open:
                self._serial.close()
                logger.info(f"Closed serial port {self.port}")
        finally:
            self._serial = None
            with self._registry_lock:
                self._open_ports.discard(self.port)


class MockTransport(Transport):
    """
    Mock transport for testing.

    Simulates module responses without requiring hardware. Queued responses
    (add_response) survive flush(); injected input (inject) is stale data that
    flush() discards. Reads with nothing queued block for the timeout.
    """

    def __init__(self, auto_open: bool = True) -> None:
        """
        Initialize mock transport.

        Args:
            auto_open: Start in the open state (as if open() had been called)
        """
        self._open = auto_open
        self._input_buffer: Deque[bytes] = deque()
        self._response_queue: Deque[bytes] = deque()
        self._cond = threading.Condition()
        self.open_count = 0
        self.flush_count = 0
        self.written: list[bytes] = []
        self.fail_open = False
        self._replies: dict[str, Deque[list[str]]] = {}
        logger.info("Initialized MockTransport")

    def add_reply(self, command: str, lines: list[str]) -> None:
        """
        Queue response lines to be produced when a command is written.

        Replies are used once each, in the order they were added.

        Args:
            command: Command text without terminator (e.g., "ATH")
            lines: Response lines (e.g., ["OK"])
        """
        with self._cond:
            self._replies.setdefault(command, deque()).append(list(lines))

    def add_response(self, lines: list[str]) -> None:
        """
        Queue response lines to be returned by read_line.

        Args:
            lines: List of response lines (e.g., ["+CSQ: 24,99", "OK"])
        """
        with self._cond:
            for line in lines:
                self._response_queue.append((line + "\r\n").encode("utf-8"))
            self._cond.notify_all()
            logger.debug(f"Added mock response: {lines}")

    def inject(self, lines: list[str]) -> None:
        """Put unread input on the line, as if left over from an earlier exchange."""
        with self._cond:
            for line in lines:
                self._input_buffer.append((line + "\r\n").encode("utf-8"))
            self._cond.notify_all()

    def open(self) -> None:
        """Simulate opening the port."""
        if self.fail_open:
            raise TransportError("MockTransport configured to fail on open")
        self.open_count += 1
        self._open = True
        logger.info("Opened MockTransport")

    def _check_open(self) -> None:
        if not self._open:
            raise DeviceDisconnectedError(
                "MockTransport is closed (simulating device disconnection)",
                response="MockTransport closed"
            )

    def flush(self) -> None:
        """Discard injected input."""
        self._check_open()
        with self._cond:
            self._input_buffer.clear()
            self.flush_count += 1
            logger.debug("Reset mock input buffer")

    def write(self, data: bytes) -> int:
        """Record written data and produce any scripted reply."""
        self._check_open()
        with self._cond:
            self.written.append(data)
            replies = self._replies.get(data.decode("utf-8", errors="ignore").strip())
            if replies:
                for line in replies.popleft():
                    self._response_queue.append((line + "\r\n").encode("utf-8"))
                self._cond.notify_all()
        logger.debug(f"Mock write: {data}")
        return len(data)

    def read_line(self, timeout: Optional[float] = None) -> bytes:
        """
        Simulate reading from the module.

        Returns injected input first, then queued responses one line at a time.
        """
        self._check_open()

        with self._cond:
            if not self._input_buffer and not self._response_queue:
                self._cond.wait(timeout if timeout is not None else 0)

            if self._input_buffer:
                return self._input_buffer.popleft()

            if self._response_queue:
                result = self._response_queue.popleft()
                logger.debug(f"Mock read: {result}")
                return result

        # No data available
        return b""

    def is_open(self) -> bool:
        """Check if mock transport is open."""
        return self._open

    def close(self) -> None:
        """Close mock transport."""
        with self._cond:
            self._open = False
            self._cond.notify_all()
        logger.info("Closed MockTransport")

    @property
    def commands(self) -> list[str]:
        """Written data decoded with line terminators stripped."""
        return [data.decode("utf-8").strip() for data in self.written]
