"""
Modem configuration.

Settings consumed by the driver. Loading them from a file or environment is
left to the application embedding the library.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ModemConfig:
    """
    Driver settings.

    Attributes:
        port: Serial device path (e.g., /dev/ttyUSB0)
        baudrate: Serial baud rate
        call_duration: Seconds to keep a call up before hanging up
        network_check_interval: Minutes between scheduled network checks
        settle_delay: Seconds to wait after writing a command before reading
        max_response_lines: Maximum lines read per command
        read_timeout: Per-line read timeout while collecting a command response
        monitor_read_timeout: Per-read timeout of the call monitor
        min_signal_strength: Signal must be strictly above this to be normal
    """
    port: Optional[str] = None
    baudrate: int = 115200
    call_duration: float = 10.0
    network_check_interval: int = 10
    settle_delay: float = 0.1
    max_response_lines: int = 10
    read_timeout: float = 1.0
    monitor_read_timeout: float = 0.5
    min_signal_strength: int = 5

    def __post_init__(self) -> None:
        if self.call_duration <= 0:
            self.call_duration = 10.0
        if self.network_check_interval <= 0:
            self.network_check_interval = 10
        if self.max_response_lines < 1:
            raise ValueError("max_response_lines must be at least 1")
