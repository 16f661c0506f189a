"""
Feature managers for modem functionality.

Provides high-level managers for different module capabilities:
- NetworkManager: Signal strength, registration, operator
- DeviceManager: IMEI, SIM state
- CallController: Voice call dial/hangup and call state
- StatusReporter: Network status snapshots and reports
"""

from .device_info import DeviceManager
from .network import NetworkManager
from .call import CallController, sanitize_number
from .status import StatusReporter

__all__ = [
    "DeviceManager",
    "NetworkManager",
    "CallController",
    "sanitize_number",
    "StatusReporter",
]
