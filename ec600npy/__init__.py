"""
ec600npy - Python library for controlling EC600N cellular modules over AT commands.
"""

from .version import __version__
from .modem import EC600NModem
from .config import ModemConfig
from .notify import NotificationSink, LoggingSink
from .core import MockTransport, SerialTransport, Transport

from .types import (
    NetworkStatus,
    RegistrationState,
    SIMState,
    CallStatus,
    CallState,
    CallSession,
    ConnectionInfo,
)

from .exceptions import (
    EC600NError,
    TransportError,
    DeviceDisconnectedError,
    ParseError,
    ValidationError,
    DialError,
    HangupError,
    NotifyError,
    ModemNotConnectedError,
)

__all__ = [
    "__version__",
    "EC600NModem",
    "ModemConfig",
    "NotificationSink",
    "LoggingSink",
    "MockTransport",
    "SerialTransport",
    "Transport",
    "NetworkStatus",
    "RegistrationState",
    "SIMState",
    "CallStatus",
    "CallState",
    "CallSession",
    "ConnectionInfo",
    "EC600NError",
    "TransportError",
    "DeviceDisconnectedError",
    "ParseError",
    "ValidationError",
    "DialError",
    "HangupError",
    "NotifyError",
    "ModemNotConnectedError",
]
