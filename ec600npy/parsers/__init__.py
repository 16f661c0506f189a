"""
Response parsers for AT command responses.

Provides type-safe parsing of module responses into structured data.
"""

from .base import ResponseParser
from .network import (
    SignalStrengthParser,
    RegistrationStateParser,
    SIMStateParser,
    OperatorNameParser,
    IMEIParser,
    REGISTRATION_CODES,
)

__all__ = [
    "ResponseParser",
    "SignalStrengthParser",
    "RegistrationStateParser",
    "SIMStateParser",
    "OperatorNameParser",
    "IMEIParser",
    "REGISTRATION_CODES",
]
