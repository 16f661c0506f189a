"""
Main EC600NModem class.

User-facing API that coordinates the feature managers.
"""

import logging
import queue
import threading
from dataclasses import replace
from typing import Callable, Optional

from .config import ModemConfig
from .core import ModemCore, SerialTransport, Transport
from .exceptions import EC600NError, DialError, NotifyError
from .features import CallController, DeviceManager, NetworkManager, StatusReporter
from .notify import NotificationSink, LoggingSink
from .types import CallSession, CallStatus, ConnectionInfo, NetworkStatus

logger = logging.getLogger(__name__)


class EC600NModem:
    """
    Main interface for EC600N module control.

    Provides a high-level API through feature managers:

    - network: Signal strength, registration, operator
    - device: IMEI and SIM state
    - calls: Voice call dial/hangup and call state
    - status: Network status snapshots and reports

    Example usage with context manager:

    .. code-block:: python

        with EC600NModem(port="/dev/ttyUSB0") as modem:
            status = modem.check_network_status()
            print(f"Signal: {status.signal_strength}")

            session = modem.make_call("13800138000")
            for call_status in session.monitor:
                print(call_status)

    Example usage with manual lifecycle management:

    .. code-block:: python

        modem = EC600NModem(port="/dev/ttyUSB0")
        modem.connect()
        # ... use modem ...
        modem.close()
    """

    def __init__(
        self,
        port: Optional[str] = None,
        transport: Optional[Transport] = None,
        baudrate: Optional[int] = None,
        config: Optional[ModemConfig] = None,
        sink: Optional[NotificationSink] = None,
        on_call_status: Optional[Callable[[CallStatus], None]] = None,
        auto_connect: bool = False
    ) -> None:
        """
        Initialize EC600NModem.

        Args:
            port: Serial port path (e.g., "/dev/ttyUSB0"). Overrides config.port.
            transport: Custom transport instance (for testing). Overrides port if provided.
            baudrate: Serial port baud rate. Overrides config.baudrate.
            config: Driver settings (defaults if None)
            sink: Notification sink for status reports (LoggingSink if None)
            on_call_status: Optional callback for call-progress statuses.
                           Runs in the monitor thread.
            auto_connect: Connect immediately (default: False)

        Raises:
            ValueError: If neither port nor transport is provided
            TransportError: If auto_connect is set and connecting fails

        Example:

        .. code-block:: python

            modem = EC600NModem(
                config=ModemConfig(port="/dev/ttyUSB0", call_duration=20),
                on_call_status=lambda status: print(status.value)
            )

            # Using custom transport (for testing)
            from ec600npy.core import MockTransport
            modem = EC600NModem(transport=MockTransport())
        """
        overrides = {}
        if port is not None:
            overrides["port"] = port
        if baudrate is not None:
            overrides["baudrate"] = baudrate
        # Copy so overrides never leak into the caller's config
        self.config = replace(config or ModemConfig(), **overrides)

        if transport is None:
            if self.config.port is None:
                raise ValueError("Either 'port' or 'transport' must be provided")
            transport = SerialTransport(
                port=self.config.port,
                baudrate=self.config.baudrate,
                timeout=self.config.read_timeout
            )
            logger.info(f"Created serial transport for {self.config.port}")

        self._core = ModemCore(transport=transport, config=self.config)
        self.sink = sink or LoggingSink()
        self._on_call_status = on_call_status

        self.network = NetworkManager(self._core)
        self.device = DeviceManager(self._core)
        self.calls = CallController(self._core)
        self.status = StatusReporter(
            self._core,
            sink=self.sink,
            network=self.network,
            device=self.device,
            min_signal_strength=self.config.min_signal_strength
        )

        self._session: Optional[CallSession] = None
        self._session_lock = threading.Lock()
        # Serializes call setup and teardown
        self._call_lock = threading.Lock()

        logger.info("Initialized EC600NModem")

        if auto_connect:
            self.connect()

    def connect(self) -> None:
        """
        Open the serial port and verify the module answers AT.

        On failure the modem stays not connected and every other operation
        raises ModemNotConnectedError.

        Raises:
            TransportError: If the port cannot be opened or the module is silent
        """
        self._core.connect()
        logger.info("Modem connected")

    def close(self) -> None:
        """
        Close the modem connection.

        Cancels any call monitor, forgets the call state and closes the transport.
        """
        with self._call_lock:
            self._end_session()
            self.calls.reset()
            self._core.close()
        logger.info("Modem closed")

    def is_connected(self) -> bool:
        """Check if the modem is connected."""
        return self._core.is_connected()

    @property
    def connection(self) -> ConnectionInfo:
        """Serial connection details."""
        transport = self._core.transport
        return ConnectionInfo(
            port=getattr(transport, "port", self.config.port) or "",
            baudrate=getattr(transport, "baudrate", self.config.baudrate),
            connected=self.is_connected()
        )

    @property
    def session(self) -> Optional[CallSession]:
        """Active call session, if any."""
        with self._session_lock:
            return self._session

    @property
    def _monitor_join_timeout(self) -> float:
        return self.config.monitor_read_timeout * 2 + 0.5

    def _take_session(self) -> Optional[CallSession]:
        with self._session_lock:
            session, self._session = self._session, None
            return session

    def _end_session(self) -> None:
        """Stop the current session's monitor and wait for its thread."""
        session = self._take_session()
        if session is None:
            return
        session.monitor.cancel()
        if not session.monitor.join(timeout=self._monitor_join_timeout):
            logger.warning("Call monitor did not stop in time")

    def _handle_call_status(self, session: CallSession, status: CallStatus) -> None:
        """Monitor callback: advance call state and drop finished sessions."""
        with self._session_lock:
            current = self._session is session
        if not current:
            logger.debug(f"Ignoring {status.value} from a retired call to {session.number}")
            return

        self.calls.apply_status(status)

        if status.is_terminal:
            with self._session_lock:
                if self._session is session:
                    self._session = None

        if self._on_call_status is not None:
            self._on_call_status(status)

    def make_call(self, number: str) -> CallSession:
        """
        Dial a number and start monitoring call progress.

        A returned session means the module accepted the dial; whether the
        call connects is reported by session.monitor. A leftover session of a
        call that is no longer active (e.g. after an ERROR status) is stopped
        before dialing.

        Args:
            number: Destination number (dashes and spaces are removed)

        Returns:
            CallSession for the new call

        Raises:
            ModemNotConnectedError: If not connected
            ValidationError: If the number is empty
            DialError: If the module rejects the dial or a call is active

        Example:

        .. code-block:: python

            session = modem.make_call("138-0013-8000")
            status = session.monitor.get(timeout=30)
        """
        self._core.require_connected()

        with self._call_lock:
            if not self.calls.state.is_active:
                self._end_session()

            dialed = self.calls.dial(number)

            def on_status(status: CallStatus) -> None:
                self._handle_call_status(session, status)

            monitor = self._core.create_monitor(on_status=on_status)
            session = CallSession(number=dialed, monitor=monitor)
            with self._session_lock:
                self._session = session
            monitor.start()

        return session

    def hangup_call(self) -> None:
        """
        Hang up the current call.

        Stops the call monitor first so ATH is not interleaved with its reads.

        Raises:
            ModemNotConnectedError: If not connected
            HangupError: If the module does not acknowledge ATH
        """
        self._core.require_connected()

        with self._call_lock:
            self._end_session()
            self.calls.hangup()

    def call(self, number: str, duration: Optional[float] = None) -> Optional[CallStatus]:
        """
        Place a call, keep it up for a while, then hang up.

        Returns early if the call ends on its own (busy, no answer, no carrier).
        Dial failures are also sent to the notification sink.

        Args:
            number: Destination number
            duration: Seconds to keep the call up (config.call_duration if None)

        Returns:
            Last call status observed, or None if none was reported

        Raises:
            ValidationError, DialError: If the call could not be placed
            HangupError: If the final hangup fails
        """
        duration = self.config.call_duration if duration is None else duration

        try:
            session = self.make_call(number)
        except DialError as e:
            self._notify(f"Call to {number} failed: {e}")
            raise

        logger.info(f"In call with {session.number}, hanging up after {duration}s")
        last_status: Optional[CallStatus] = None

        while True:
            remaining = duration - session.elapsed
            if remaining <= 0:
                break
            try:
                status = session.monitor.get(timeout=remaining)
            except queue.Empty:
                break
            if status is None:
                break
            last_status = status
            if status.is_terminal:
                logger.info(f"Call to {session.number} ended early after {session.elapsed:.1f}s: {status.value}")
                return last_status

        self.hangup_call()
        logger.info(f"Call to {session.number} hung up after {session.elapsed:.1f}s")
        return last_status

    def check_network_status(self) -> NetworkStatus:
        """
        Collect a network status snapshot.

        Fields that cannot be read keep their zero values.

        Raises:
            ModemNotConnectedError: If not connected
        """
        self._core.require_connected()
        return self.status.check_status()

    def start_network_monitoring(self) -> bool:
        """
        Check network status and send a report to the notification sink.

        Returns:
            True if the network status is normal

        Raises:
            ModemNotConnectedError: If not connected
            NotifyError: If the report could not be sent
        """
        self._core.require_connected()

        status = self.status.check_status()
        normal = self.status.is_normal(status)
        if not normal:
            logger.warning("Network status abnormal")

        try:
            self.status.report(status)
        except NotifyError as e:
            logger.error(f"Failed to send network status report: {e}")
            raise

        return normal

    def send_raw_at(self, cmd: str) -> str:
        """
        Send a raw AT command.

        For commands not covered by the feature managers.

        Args:
            cmd: AT command (e.g., "ATI" or "+CSQ")

        Returns:
            Raw response text

        Example:

        .. code-block:: python

            print(modem.send_raw_at("ATI"))
        """
        return self._core.send_at(cmd)

    def _notify(self, text: str) -> None:
        try:
            self.sink.send(text)
        except EC600NError as e:
            logger.error(f"Failed to send notification: {e}")

    def __enter__(self):
        """
        Context manager entry.

        Connects if not already connected.
        """
        if not self.is_connected():
            self.connect()
        return self

    def __exit__(self, *exc):
        """
        Context manager exit.

        Closes the modem connection.
        """
        self.close()

    def __repr__(self) -> str:
        """String representation of modem."""
        status = "connected" if self.is_connected() else "disconnected"
        return f"<EC600NModem status={status}>"
