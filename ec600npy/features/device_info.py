"""
Device information manager.

Handles device-related queries: IMEI and SIM state.
"""

import logging
from typing import TYPE_CHECKING

from ..types import SIMState
from ..parsers.network import IMEIParser, SIMStateParser

if TYPE_CHECKING:
    from ..core import ModemCore

logger = logging.getLogger(__name__)


class DeviceManager:
    """
    Manages device information and status.

    Provides methods for querying device identity and SIM state.
    """

    def __init__(self, modem_core: "ModemCore") -> None:
        """
        Initialize device manager.

        Args:
            modem_core: ModemCore instance for AT command execution
        """
        self.modem = modem_core

        # Parsers
        self._imei_parser = IMEIParser()
        self._sim_parser = SIMStateParser()

        logger.debug("Initialized DeviceManager")

    def get_imei(self) -> str:
        """
        Get device IMEI (International Mobile Equipment Identity).

        Returns:
            15-digit IMEI string

        Raises:
            ParseError: If no 15-digit line is found

        Example:

        .. code-block:: python

            imei = modem.device.get_imei()
            print(f"IMEI: {imei}")
        """
        logger.info("Getting IMEI")
        response = self.modem.send_at("AT+CGSN")
        imei = self._imei_parser.parse(response)
        logger.debug(f"IMEI: {imei}")
        return imei

    def get_sim_state(self) -> SIMState:
        """
        Get SIM card state.

        Returns:
            SIMState enum value (UNKNOWN if the response is not recognized)

        Example:

        .. code-block:: python

            sim_state = modem.device.get_sim_state()
            if sim_state == SIMState.SIM_PIN:
                print("SIM PIN required")
        """
        logger.info("Getting SIM state")
        response = self.modem.send_at("AT+CPIN?")
        sim_state = self._sim_parser.parse(response)

        if sim_state != SIMState.READY:
            logger.warning(f"SIM not ready: {sim_state.value}")
        else:
            logger.debug(f"SIM state: {sim_state.value}")

        return sim_state
