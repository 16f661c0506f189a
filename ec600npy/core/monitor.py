"""
Call-progress monitor.

Scans the serial stream for call-progress keywords while a call is active and
publishes CallStatus events on a bounded channel.
"""

import logging
import queue
import threading
import time
from types import MappingProxyType
from typing import Callable, Iterator, Optional

from .transport import Transport
from ..exceptions import EC600NError
from ..types import CallStatus

logger = logging.getLogger(__name__)

# Type alias for status callbacks
StatusCallback = Callable[[CallStatus], None]

# Checked in order; the first keyword found in a line wins
CALL_PROGRESS_KEYWORDS = (
    ("NO CARRIER", CallStatus.NO_CARRIER),
    ("BUSY", CallStatus.BUSY),
    ("NO ANSWER", CallStatus.NO_ANSWER),
    ("CONNECT", CallStatus.CONNECTED),
    ("ERROR", CallStatus.ERROR),
)

_LOG_LEVELS = MappingProxyType({
    CallStatus.ERROR: logging.WARNING,
})


def classify_line(line: str) -> Optional[CallStatus]:
    """
    Map a module output line to a call status.

    Args:
        line: Raw line (case and surrounding whitespace are ignored)

    Returns:
        Matching CallStatus, or None if the line carries no call progress
    """
    upper = line.strip().upper()
    for keyword, status in CALL_PROGRESS_KEYWORDS:
        if keyword in upper:
            return status
    return None


class CallMonitor:
    """
    Background scan of the transport for call-progress lines.

    Features:
    - Every read is bounded by read_timeout, so cancel() takes effect
      within one read interval
    - Takes the transport lock per read, letting commands such as ATH
      run between reads
    - Bounded event queue; the channel is closed when the scan ends

    Example:

    .. code-block:: python

        monitor = CallMonitor(transport, lock)
        monitor.start()
        for status in monitor:
            print(status)
    """

    def __init__(
        self,
        transport: Transport,
        lock: threading.Lock,
        read_timeout: float = 0.5,
        max_events: int = 16,
        on_status: Optional[StatusCallback] = None
    ) -> None:
        """
        Initialize call monitor.

        Args:
            transport: Transport to read from
            lock: Transport lock shared with ATProtocol
            read_timeout: Bound on each lock wait and read, in seconds
            max_events: Capacity of the event queue
            on_status: Optional callback run in the monitor thread per status
        """
        self.transport = transport
        self.read_timeout = read_timeout
        self._lock = lock
        self._on_status = on_status

        self._events: queue.Queue[CallStatus] = queue.Queue(maxsize=max_events)
        self._stop_event = threading.Event()
        self._closed = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the monitor thread."""
        if self._thread is not None:
            logger.warning("CallMonitor already started")
            return

        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="CallMonitorThread"
        )
        self._thread.start()
        logger.info("Started call monitor")

    def cancel(self) -> None:
        """Ask the monitor to stop. No statuses are emitted afterwards."""
        if not self._stop_event.is_set():
            logger.info("Cancelling call monitor")
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the monitor thread to finish.

        Returns:
            True if the thread has finished
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Wait until the event channel is closed."""
        return self._closed.wait(timeout)

    @property
    def closed(self) -> bool:
        """True once the scan has ended and no more events will be queued."""
        return self._closed.is_set()

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called."""
        return self._stop_event.is_set()

    def get(self, timeout: Optional[float] = None) -> Optional[CallStatus]:
        """
        Get the next status.

        Args:
            timeout: Seconds to wait (None waits until a status or closure)

        Returns:
            Next CallStatus, or None if the channel is closed and drained

        Raises:
            queue.Empty: If nothing arrived within the timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        poll = min(0.05, self.read_timeout)

        while True:
            wait = poll
            if deadline is not None:
                wait = max(0.0, min(poll, deadline - time.monotonic()))
            try:
                return self._events.get(timeout=wait)
            except queue.Empty:
                if self._closed.is_set() and self._events.empty():
                    return None
                if deadline is not None and time.monotonic() >= deadline:
                    raise

    def __iter__(self) -> Iterator[CallStatus]:
        """Yield statuses until the channel is closed."""
        while True:
            status = self.get()
            if status is None:
                return
            yield status

    def _run(self) -> None:
        """Scan lines until a terminal status or cancellation."""
        logger.debug("Call monitor thread started")

        try:
            while not self._stop_event.is_set():
                line = self._read_line()
                if not line:
                    # Let a waiting command take the lock before the next read
                    self._stop_event.wait(0.01)
                    continue

                status = classify_line(line)
                if status is None:
                    logger.debug(f"Call monitor ignoring line: {line}")
                    continue

                logger.log(_LOG_LEVELS.get(status, logging.INFO),
                           f"Call progress: {line} -> {status.value}")

                if not self._emit(status):
                    break

                if status.is_terminal:
                    break
        finally:
            self._closed.set()
            logger.debug("Call monitor thread stopped")

    def _read_line(self) -> Optional[str]:
        """
        Read one line under the transport lock.

        Waiting for the lock and reading share one read_timeout budget.
        Timeouts and read errors return None.
        """
        deadline = time.monotonic() + self.read_timeout

        if not self._lock.acquire(timeout=self.read_timeout):
            return None

        line_bytes = b""
        failed = False
        try:
            remaining = deadline - time.monotonic()
            if not self._stop_event.is_set() and remaining > 0:
                line_bytes = self.transport.read_line(timeout=remaining)
        except EC600NError as e:
            logger.debug(f"Call monitor read failed: {e}")
            failed = True
        finally:
            self._lock.release()

        if failed:
            # Back off briefly so a dead port does not spin
            self._stop_event.wait(0.1)
            return None

        return line_bytes.decode("utf-8", errors="ignore").strip()

    def _emit(self, status: CallStatus) -> bool:
        """
        Publish a status unless cancelled.

        Returns:
            False if the monitor was cancelled before the status was queued
        """
        if self._stop_event.is_set():
            return False

        if self._on_status is not None:
            try:
                self._on_status(status)
            except Exception as e:
                logger.error(f"Call status callback failed: {e}", exc_info=True)

        while not self._stop_event.is_set():
            try:
                self._events.put(status, timeout=self.read_timeout)
                return True
            except queue.Full:
                logger.warning("Call status queue full, waiting for consumer")

        return False
