"""
Status reporter.

Assembles network status snapshots, judges them and hands summaries to a
notification sink.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from .network import NetworkManager
from .device_info import DeviceManager
from ..types import NetworkStatus, RegistrationState, SIMState
from ..exceptions import EC600NError
from ..notify import NotificationSink, LoggingSink

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class StatusReporter:
    """
    Builds and reports network status snapshots.

    Uses NetworkManager and DeviceManager for the individual queries; a failed
    query only blanks its own field.
    """

    def __init__(
        self,
        modem_core: "ModemCore",
        sink: Optional[NotificationSink] = None,
        network: Optional[NetworkManager] = None,
        device: Optional[DeviceManager] = None,
        min_signal_strength: int = 5
    ) -> None:
        """
        Initialize status reporter.

        Args:
            modem_core: ModemCore instance for AT command execution
            sink: Destination for reports (LoggingSink if None)
            network: NetworkManager to query (created if None)
            device: DeviceManager to query (created if None)
            min_signal_strength: Signal must be above this to be normal
        """
        self.modem = modem_core
        self.sink = sink or LoggingSink()
        self.network = network or NetworkManager(modem_core)
        self.device = device or DeviceManager(modem_core)
        self.min_signal_strength = min_signal_strength

    def check_status(self) -> NetworkStatus:
        """
        Collect a network status snapshot. Never raises.

        Returns:
            NetworkStatus; fields that could not be read keep zero values
        """
        logger.info("Checking network status")
        timestamp = datetime.now()

        status = NetworkStatus(
            signal_strength=self._collect("signal strength", self.network.get_signal_strength, 0),
            registration_state=self._collect(
                "registration state", self.network.get_registration_state, RegistrationState.UNKNOWN
            ),
            sim_state=self._collect("SIM state", self.device.get_sim_state, SIMState.UNKNOWN),
            operator_name=self._collect("operator name", self.network.get_operator_name, ""),
            imei=self._collect("IMEI", self.device.get_imei, ""),
            timestamp=timestamp,
        )

        logger.debug(f"Network status: {status}")
        return status

    @staticmethod
    def _collect(what: str, query: Callable[[], T], default: T) -> T:
        try:
            return query()
        except EC600NError as e:
            logger.warning(f"Could not read {what}: {e}")
            return default

    def is_normal(self, status: NetworkStatus) -> bool:
        """
        Judge a snapshot.

        Returns:
            True if signal is above the threshold, the module is registered on
            its home network and the SIM is ready
        """
        return (
            status.signal_strength > self.min_signal_strength
            and status.registration_state is RegistrationState.REGISTERED_HOME
            and status.sim_state is SIMState.READY
        )

    @staticmethod
    def format_status(status: NetworkStatus) -> str:
        """Render a snapshot as a multi-line summary."""
        return "\n".join([
            f"Signal strength: {status.signal_strength}",
            f"Registration: {status.registration_state.value}",
            f"SIM: {status.sim_state.value}",
            f"Operator: {status.operator_name}",
            f"IMEI: {status.imei}",
            f"Time: {status.timestamp.strftime(TIMESTAMP_FORMAT)}",
        ])

    def build_report(self, status: NetworkStatus) -> str:
        """Build the report message for a snapshot."""
        verdict = "Normal" if self.is_normal(status) else "Abnormal"
        return f"EC600N network status report\nStatus: {verdict}\n{self.format_status(status)}"

    def report(self, status: Optional[NetworkStatus] = None) -> NetworkStatus:
        """
        Send a status report to the sink.

        Args:
            status: Snapshot to report (a fresh one is collected if None)

        Returns:
            The reported snapshot

        Raises:
            NotifyError: If the sink fails (not retried)
        """
        if status is None:
            status = self.check_status()

        self.sink.send(self.build_report(status))
        logger.info("Network status report sent")
        return status
