"""
Network manager.

Handles signal strength, network registration and operator queries.
"""

import logging
from typing import TYPE_CHECKING

from ..types import RegistrationState
from ..parsers.network import (
    SignalStrengthParser,
    RegistrationStateParser,
    OperatorNameParser
)

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)


class NetworkManager:
    """
    Manages network queries.

    Each method sends one AT command and parses its response; transport and
    parse errors propagate to the caller.
    """

    def __init__(self, modem_core: "ModemCore") -> None:
        """
        Initialize network manager.

        Args:
            modem_core: ModemCore instance for AT command execution
        """
        self.modem = modem_core

        # Parsers
        self._signal_parser = SignalStrengthParser()
        self._reg_state_parser = RegistrationStateParser()
        self._operator_parser = OperatorNameParser()

        logger.debug("Initialized NetworkManager")

    def get_signal_strength(self) -> int:
        """
        Get signal strength (RSSI).

        Returns:
            0-31, or 99 if unknown

        Raises:
            ParseError: If the response has no +CSQ line

        Example:

        .. code-block:: python

            rssi = modem.network.get_signal_strength()
            print(f"RSSI: {rssi}")
        """
        logger.info("Getting signal strength")
        response = self.modem.send_at("AT+CSQ")
        signal = self._signal_parser.parse(response)
        logger.debug(f"Signal strength: {signal}")
        return signal

    def get_registration_state(self) -> RegistrationState:
        """
        Get network registration state.

        Returns:
            RegistrationState (UNKNOWN for codes outside the standard table)

        Raises:
            ParseError: If the response has no +CREG line

        Example:

        .. code-block:: python

            state = modem.network.get_registration_state()
            if state.is_registered:
                print(f"Registered: {state.value}")
        """
        logger.info("Getting registration state")
        response = self.modem.send_at("AT+CREG?")
        state = self._reg_state_parser.parse(response)
        logger.debug(f"Registration state: {state.value}")
        return state

    def get_operator_name(self) -> str:
        """
        Get current network operator name.

        Returns:
            Operator name as reported by the module

        Raises:
            ParseError: If no operator is reported (e.g., not registered)
        """
        logger.info("Getting current operator")
        response = self.modem.send_at("AT+COPS?")
        operator = self._operator_parser.parse(response)
        logger.debug(f"Current operator: {operator}")
        return operator
