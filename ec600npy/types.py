"""
Data types and structures for ec600npy.

Provides type-safe representations of module and call state.
"""

import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .core.monitor import CallMonitor


class RegistrationState(Enum):
    """Network registration state (AT+CREG?)."""
    UNREGISTERED = "unregistered"
    REGISTERED_HOME = "registered-home"
    SEARCHING = "searching"
    DENIED = "denied"
    REGISTERED_ROAMING = "registered-roaming"
    UNKNOWN = "unknown"

    @property
    def is_registered(self) -> bool:
        """Check if registered to a network (home or roaming)."""
        return self in (
            RegistrationState.REGISTERED_HOME,
            RegistrationState.REGISTERED_ROAMING
        )


class SIMState(Enum):
    """SIM card states (AT+CPIN?)."""
    READY = "ready"
    SIM_PIN = "needs-pin"
    SIM_PUK = "needs-puk"
    UNKNOWN = "unknown"


class CallStatus(Enum):
    """
    Call-progress status reported by the call monitor.

    BUSY, NO_ANSWER and NO_CARRIER end a call; CONNECTED and ERROR are
    reported without ending the scan.
    """
    CONNECTED = "connected"
    HANGUP = "hangup"
    BUSY = "busy"
    NO_ANSWER = "no-answer"
    NO_CARRIER = "no-carrier"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Check if this status ends the call."""
        return self in (CallStatus.BUSY, CallStatus.NO_ANSWER, CallStatus.NO_CARRIER)


class CallState(Enum):
    """Call controller states."""
    IDLE = "idle"
    DIALING = "dialing"
    CONNECTED = "connected"
    BUSY = "busy"
    NO_ANSWER = "no-answer"
    NO_CARRIER = "no-carrier"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        """Check if a call is in progress."""
        return self in (CallState.DIALING, CallState.CONNECTED)


@dataclass(frozen=True)
class ConnectionInfo:
    """Serial connection to the module."""
    port: str        # Device path (e.g., "/dev/ttyUSB0")
    baudrate: int    # Baud rate
    connected: bool  # True after a successful connect()


@dataclass(frozen=True)
class NetworkStatus:
    """
    Snapshot of module and network status.

    Every field is collected independently; a field that could not be read
    keeps its zero value.

    RSSI (signal_strength):
        0: -113 dBm or less
        1: -111 dBm
        2...30: -109 to -53 dBm
        31: -51 dBm or greater
        99: Not known or not detectable
    """
    signal_strength: int = 0
    registration_state: RegistrationState = RegistrationState.UNKNOWN
    sim_state: SIMState = SIMState.UNKNOWN
    operator_name: str = ""
    imei: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def signal_dbm(self) -> Optional[int]:
        """Convert RSSI to dBm value."""
        if self.signal_strength == 99:
            return None
        if self.signal_strength <= 0:
            return -113
        if self.signal_strength >= 31:
            return -51
        return -113 + (self.signal_strength * 2)

    def as_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible types."""
        data = asdict(self)
        data["registration_state"] = self.registration_state.value
        data["sim_state"] = self.sim_state.value
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class CallSession:
    """Active outgoing call."""
    number: str                  # Sanitized destination number
    monitor: "CallMonitor"       # Background call-progress scan
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        """Seconds since the dial was accepted."""
        return time.monotonic() - self.started_at
