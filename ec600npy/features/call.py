"""
Call controller.

Dials and hangs up voice calls and tracks the call state machine:

    IDLE -> DIALING -> {CONNECTED, BUSY, NO_ANSWER, NO_CARRIER, ERROR} -> IDLE

A dial accepted by the module only means DIALING; whether the far end
answered is learned from the call monitor through apply_status().
"""

import logging
import threading
from types import MappingProxyType
from typing import TYPE_CHECKING, Optional

from ..types import CallState, CallStatus
from ..exceptions import ValidationError, DialError, HangupError

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)

# Responses to ATD that mean the module accepted the dial
DIAL_ACCEPTED = ("OK", "CONNECT")

_STATUS_TO_STATE = MappingProxyType({
    CallStatus.CONNECTED: CallState.CONNECTED,
    CallStatus.HANGUP: CallState.IDLE,
    CallStatus.BUSY: CallState.BUSY,
    CallStatus.NO_ANSWER: CallState.NO_ANSWER,
    CallStatus.NO_CARRIER: CallState.NO_CARRIER,
    CallStatus.ERROR: CallState.ERROR,
})


def sanitize_number(number: str) -> str:
    """
    Normalize a phone number for ATD.

    Trims surrounding whitespace and removes dashes and interior spaces.

    Example:

    .. code-block:: python

        sanitize_number(" 138-0013-8000 ")  # "13800138000"
    """
    return number.strip().replace("-", "").replace(" ", "")


class CallController:
    """
    Manages outgoing voice calls.

    Provides dial/hangup and keeps the call state machine.
    """

    def __init__(self, modem_core: "ModemCore") -> None:
        """
        Initialize call controller.

        Args:
            modem_core: ModemCore instance for AT command execution
        """
        self.modem = modem_core

        self._state = CallState.IDLE
        self._state_lock = threading.Lock()
        self.number: Optional[str] = None
        self.last_status: Optional[CallStatus] = None

        logger.debug("Initialized CallController")

    @property
    def state(self) -> CallState:
        """Current call state."""
        with self._state_lock:
            return self._state

    def _set_state(self, state: CallState) -> None:
        with self._state_lock:
            if state != self._state:
                logger.debug(f"Call state: {self._state.value} -> {state.value}")
            self._state = state

    def dial(self, number: str) -> str:
        """
        Dial a number.

        Args:
            number: Destination number; dashes and spaces are removed

        Returns:
            Sanitized number that was dialed

        Raises:
            ValidationError: If the number is empty after sanitizing
                (nothing is sent to the module)
            DialError: If a call is already active or the module rejects ATD

        Example:

        .. code-block:: python

            modem.calls.dial("138-0013-8000")
        """
        sanitized = sanitize_number(number)
        if not sanitized:
            raise ValidationError("Phone number must not be empty")

        with self._state_lock:
            if self._state.is_active:
                raise DialError(f"Call already in progress to {self.number}")
            logger.debug(f"Call state: {self._state.value} -> {CallState.DIALING.value}")
            self._state = CallState.DIALING
            self.number = sanitized

        command = f"ATD{sanitized};"
        logger.info(f"Dialing {sanitized}")

        try:
            response = self.modem.send_at(command)
        except Exception:
            self.reset()
            raise

        if not any(token in response for token in DIAL_ACCEPTED):
            self.reset()
            logger.error(f"Dial rejected for {sanitized}")
            raise DialError(
                f"Failed to dial {sanitized}",
                command=command,
                response=response
            )

        self.last_status = None
        logger.info(f"Dial accepted: {sanitized}")
        return sanitized

    def hangup(self) -> None:
        """
        Hang up the current call.

        Raises:
            HangupError: If the module does not answer ATH with OK
        """
        logger.info("Hanging up")
        response = self.modem.send_at("ATH")

        if "OK" not in response:
            logger.error("Hangup not acknowledged")
            raise HangupError(
                "Failed to hang up",
                command="ATH",
                response=response
            )

        self._set_state(CallState.IDLE)
        self.number = None
        logger.info("Call hung up")

    def reset(self) -> None:
        """Forget any call in progress, e.g. after the connection is closed."""
        self._set_state(CallState.IDLE)
        self.number = None

    def apply_status(self, status: CallStatus) -> None:
        """
        Advance the state machine from a call monitor status.

        Terminal statuses are recorded in last_status and return the
        controller to IDLE.
        """
        self.last_status = status
        self._set_state(_STATUS_TO_STATE[status])

        if status.is_terminal or status is CallStatus.HANGUP:
            logger.info(f"Call to {self.number} ended: {status.value}")
            self._set_state(CallState.IDLE)
