"""
Notification sinks for user-facing cart errors.

A notifier is fire-and-forget: the cart never looks at what it returns, and
a failing notifier must not break a cart operation (see `notify_error`).
"""

import sys
from typing import TextIO

from rocketshoes.logging import get_logger

logger = get_logger(__name__)


class Notifier:
    """Base notifier."""

    def error(self, message: str) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Reports messages through the log only."""

    def error(self, message: str) -> None:
        logger.warning(f"Cart notification: {message}")


class ConsoleNotifier(Notifier):
    """Writes messages to a text stream (stderr by default)."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def error(self, message: str) -> None:
        stream = self.stream or sys.stderr
        stream.write(f"{message}\n")
        stream.flush()


def notify_error(notifier: Notifier, message: str) -> None:
    """Send an error message, logging instead of raising if the sink fails."""
    try:
        notifier.error(message)
    except Exception as e:
        logger.warning(f"Notifier {type(notifier).__name__} failed: {e}", exc_info=True)
