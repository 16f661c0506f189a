"""
Network and device response parsers.

Parses responses for signal, registration, SIM, operator and IMEI commands.
"""

import logging
import re
from types import MappingProxyType

from .base import ResponseParser
from ..types import RegistrationState, SIMState
from ..exceptions import ParseError

logger = logging.getLogger(__name__)

CSQ_PATTERN = re.compile(r"\+CSQ:\s*(\d+),(\d+)")
CREG_PATTERN = re.compile(r"\+CREG:\s*\d+,(\d+)")
COPS_PATTERN = re.compile(r'\+COPS:\s*\d+,\d+,"([^"]+)"')
IMEI_PATTERN = re.compile(r"[0-9]{15}")

REGISTRATION_CODES = MappingProxyType({
    0: RegistrationState.UNREGISTERED,
    1: RegistrationState.REGISTERED_HOME,
    2: RegistrationState.SEARCHING,
    3: RegistrationState.DENIED,
    5: RegistrationState.REGISTERED_ROAMING,
})

# Checked in order against the AT+CPIN? response
SIM_KEYWORDS = (
    ("READY", SIMState.READY),
    ("SIM PIN", SIMState.SIM_PIN),
    ("SIM PUK", SIMState.SIM_PUK),
)


class SignalStrengthParser(ResponseParser[int]):
    """Parser for AT+CSQ (signal quality) response."""

    command = "AT+CSQ"

    def parse(self, response: str) -> int:
        """
        Parse AT+CSQ response.

        Expected format: "+CSQ: 24,99" (the first value is the RSSI)
        """
        match = self._search(CSQ_PATTERN, response, "signal strength")
        return int(match.group(1))


class RegistrationStateParser(ResponseParser[RegistrationState]):
    """Parser for AT+CREG? (registration status) response."""

    command = "AT+CREG?"

    def parse(self, response: str) -> RegistrationState:
        """
        Parse AT+CREG? response.

        Expected format: "+CREG: 0,1". Codes outside the known table map to
        UNKNOWN rather than failing.
        """
        match = self._search(CREG_PATTERN, response, "registration status")
        code = int(match.group(1))

        state = REGISTRATION_CODES.get(code, RegistrationState.UNKNOWN)
        if state is RegistrationState.UNKNOWN:
            logger.debug(f"Unknown registration code: {code}")
        return state


class SIMStateParser(ResponseParser[SIMState]):
    """Parser for AT+CPIN? (SIM state) response. Never fails."""

    command = "AT+CPIN?"

    def parse(self, response: str) -> SIMState:
        for keyword, state in SIM_KEYWORDS:
            if keyword in response:
                return state

        logger.debug(f"Unknown SIM state: {response!r}")
        return SIMState.UNKNOWN


class OperatorNameParser(ResponseParser[str]):
    """Parser for AT+COPS? (current operator) response."""

    command = "AT+COPS?"

    def parse(self, response: str) -> str:
        """
        Parse AT+COPS? response.

        Expected format: '+COPS: 0,0,"CHINA MOBILE",7'. The quoted name is
        returned verbatim.
        """
        match = self._search(COPS_PATTERN, response, "operator name")
        return match.group(1)


class IMEIParser(ResponseParser[str]):
    """Parser for AT+CGSN (IMEI) response."""

    command = "AT+CGSN"

    def parse(self, response: str) -> str:
        """
        Parse AT+CGSN response.

        The IMEI is the first line consisting of exactly 15 decimal digits.
        """
        for line in response.splitlines():
            line = line.strip()
            if IMEI_PATTERN.fullmatch(line):
                return line

        raise ParseError(
            "Failed to parse IMEI",
            command=self.command,
            response=response
        )
