"""
Notification sinks.

A sink receives human-readable status messages (network reports, call
failures). Delivery channels such as webhooks live outside this library and
plug in by subclassing NotificationSink.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Abstract destination for status messages."""

    @abstractmethod
    def send(self, text: str) -> None:
        """
        Deliver a message.

        Args:
            text: Message text

        Raises:
            NotifyError: If the message could not be delivered
        """
        pass


class LoggingSink(NotificationSink):
    """Sink that only logs messages. Used when no other sink is configured."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def send(self, text: str) -> None:
        logger.log(self.level, f"[notify] {text}")
