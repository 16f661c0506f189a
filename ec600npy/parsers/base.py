"""
Base parser classes and utilities.

Provides reusable parsing functionality for AT command responses.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional

from ..exceptions import ParseError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ResponseParser(ABC, Generic[T]):
    """
    Abstract base class for response parsers.

    Parsers convert raw AT command response text into typed values. They hold
    no state and may be shared between threads.
    """

    #: AT command whose response this parser understands
    command: Optional[str] = None

    @abstractmethod
    def parse(self, response: str) -> T:
        """
        Parse AT command response.

        Args:
            response: Raw response text from the module

        Returns:
            Parsed value

        Raises:
            ParseError: If response cannot be parsed
        """
        pass

    def _search(self, pattern: re.Pattern, response: str, what: str) -> re.Match:
        """Search response for pattern or raise ParseError naming what was expected."""
        match = pattern.search(response)
        if match is None:
            raise ParseError(
                f"Failed to parse {what}",
                command=self.command,
                response=response
            )
        return match
