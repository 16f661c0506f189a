"""
Core modem infrastructure.

Provides low-level building blocks for modem communication:
- Transport: Serial communication abstraction
- Protocol: AT command execution
- Monitor: Background call-progress scanning
- ModemCore: Coordination of all core components
"""

from .transport import Transport, SerialTransport, MockTransport
from .protocol import ATProtocol
from .monitor import CallMonitor, StatusCallback, classify_line
from .modem import ModemCore

__all__ = [
    "Transport",
    "SerialTransport",
    "MockTransport",
    "ATProtocol",
    "CallMonitor",
    "StatusCallback",
    "classify_line",
    "ModemCore",
]
