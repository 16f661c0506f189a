"""
Exceptions for the ec600npy library.

Every error carries the AT command and the raw module response (when there is
one) so failures can be diagnosed from a log line alone.
"""

from typing import Optional


class EC600NError(Exception):
    """
    Base exception for EC600N module errors.

    All ec600npy exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        response: Optional[str] = None
    ) -> None:
        """
        Initialize exception with context.

        Args:
            message: Error description
            command: AT command that caused the error (if applicable)
            response: Raw module response text (if applicable)
        """
        self.command = command
        self.response = response
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with context."""
        parts = [super().__str__()]

        if self.command:
            parts.append(f"Command: {self.command}")

        if self.response:
            parts.append(f"Response: {self.response.strip()!r}")

        return " | ".join(parts)


class TransportError(EC600NError):
    """
    Raised when the serial transport fails.

    This indicates:
    - Serial port cannot be opened (or is already open)
    - Write or read failure
    - Transport used while closed
    """
    pass


class DeviceDisconnectedError(TransportError):
    """
    Raised when the device disappears during operation.

    Requires closing and reconnecting the modem.
    """
    pass


class ParseError(EC600NError):
    """
    Raised when a response does not match the expected grammar.

    Recovered locally by the status snapshot: the affected field keeps its
    zero value.
    """
    pass


class ValidationError(EC600NError):
    """
    Raised when caller-supplied input is invalid.

    Raised before any transport access.
    """
    pass


class DialError(EC600NError):
    """
    Raised when the module rejects a dial request.

    ``response`` holds the raw module reply.
    """
    pass


class HangupError(EC600NError):
    """
    Raised when the module does not acknowledge ATH with OK.
    """
    pass


class NotifyError(EC600NError):
    """
    Raised by a notification sink when a message cannot be delivered.
    """
    pass


class ModemNotConnectedError(EC600NError):
    """
    Raised when attempting to use the modem before a successful connect().
    """
    pass
