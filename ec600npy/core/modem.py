"""
Core modem class coordinating transport, protocol, and call monitoring.

This is the foundation that feature managers build upon.
"""

import logging
import threading
from typing import Optional

from .transport import Transport
from .protocol import ATProtocol
from .monitor import CallMonitor, StatusCallback
from ..config import ModemConfig
from ..exceptions import EC600NError, TransportError, ModemNotConnectedError

logger = logging.getLogger(__name__)


class ModemCore:
    """
    Core modem functionality.

    Coordinates:
    - Transport layer (serial communication)
    - Transport lock (one reader/writer at a time)
    - Protocol layer (AT command execution)
    - Call monitors (background call-progress scans)

    This class provides the foundation for feature-specific managers.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[ModemConfig] = None
    ) -> None:
        """
        Initialize modem core.

        Args:
            transport: Transport instance for communication
            config: Driver settings (defaults if None)
        """
        self.transport = transport
        self.config = config or ModemConfig()

        # Serializes every exchange and every monitor read on the transport
        self._transport_lock = threading.Lock()

        self.protocol = ATProtocol(
            transport,
            lock=self._transport_lock,
            settle_delay=self.config.settle_delay,
            max_lines=self.config.max_response_lines,
            read_timeout=self.config.read_timeout
        )

        self._connected = False

        logger.info("Initialized ModemCore")

    def connect(self) -> None:
        """
        Open the transport and check the module answers AT with OK.

        Raises:
            TransportError: If the port cannot be opened or the module
                does not respond; the core stays disconnected
        """
        if self._connected:
            logger.warning("ModemCore already connected")
            return

        try:
            if not self.transport.is_open():
                self.transport.open()

            response = self.protocol.send_command("AT")
            if "OK" not in response:
                raise TransportError(
                    "Module did not answer AT",
                    command="AT",
                    response=response
                )
        except EC600NError as e:
            logger.error(f"Modem connection failed: {e}")
            self._connected = False
            if self.transport.is_open():
                self.transport.close()
            raise

        self._connected = True
        logger.info("Modem connected")

    def close(self) -> None:
        """Close the transport and mark the core disconnected."""
        logger.info("Closing modem connection")
        self._connected = False
        self.transport.close()
        logger.info("Modem connection closed")

    def is_connected(self) -> bool:
        """
        Check if connect() succeeded and close() has not been called.

        Returns:
            True if connected
        """
        return self._connected

    def require_connected(self) -> None:
        """
        Raises:
            ModemNotConnectedError: If the core is not connected
        """
        if not self._connected:
            raise ModemNotConnectedError("Modem is not connected")

    def send_at(self, cmd: str) -> str:
        """
        Send an AT command.

        This is a convenience wrapper around protocol.send_command().

        Args:
            cmd: AT command (e.g., "AT+CSQ" or "+CSQ")

        Returns:
            Raw response text

        Raises:
            ModemNotConnectedError: If not connected
            TransportError: If the exchange fails
        """
        self.require_connected()
        return self.protocol.send_command(cmd)

    def create_monitor(self, on_status: Optional[StatusCallback] = None) -> CallMonitor:
        """
        Create a call monitor sharing this core's transport lock.

        Args:
            on_status: Optional callback run for each emitted status

        Returns:
            Unstarted CallMonitor
        """
        return CallMonitor(
            self.transport,
            self._transport_lock,
            read_timeout=self.config.monitor_read_timeout,
            on_status=on_status
        )

    def __enter__(self):
        """Context manager entry."""
        if not self._connected:
            self.connect()
        return self

    def __exit__(self, *exc):
        """Context manager exit."""
        self.close()
