"""Error kinds for the suggestion engine and deduplicated user notification."""

import logging
from typing import Callable, Optional, Set

from core.logging import logger


class SuggestionError(Exception):
    """Base class for suggestion engine failures."""

    code = "UNKNOWN"
    level = logging.ERROR
    # Whether the failure should reach the user, not only the log.
    surfaced = True

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class InvalidInput(SuggestionError):
    """Bad buffer, cursor or configuration at call time."""

    code = "INVALID_INPUT"
    level = logging.DEBUG
    surfaced = False


class ResponseDecodeError(SuggestionError):
    """Provider payload could not be decoded into suggestions."""

    code = "RESPONSE_DECODE_ERROR"

    def __init__(self, message: str, text: str = "", **details):
        super().__init__(message, **details)
        self.text = text


class ProcessingError(SuggestionError):
    """Chunking or slicing of the local document failed."""

    code = "PROCESSING_ERROR"


class ProviderConnectionError(SuggestionError):
    """Network or provider failure."""

    code = "PROVIDER_CONNECTION_ERROR"


class CacheFailure(SuggestionError):
    """Non-fatal cache read or write failure."""

    code = "CACHE_FAILURE"
    level = logging.WARNING
    surfaced = False


Notifier = Callable[[str, int], None]


class ErrorReporter:
    """Logs engine errors and notifies the user once per distinct message."""

    def __init__(self, notify: Optional[Notifier] = None):
        self.notify = notify
        self._seen: Set[str] = set()

    def report(self, error: BaseException, source: Optional[str] = None) -> SuggestionError:
        """
        Log an error and surface it to the user if its kind requires it.

        Args:
            error: The error to report. Foreign exceptions are wrapped.
            source: Where the error originated from.

        Returns:
            The reported SuggestionError.
        """
        if not isinstance(error, SuggestionError):
            error = SuggestionError(f"{type(error).__name__}: {error}")

        message = f"[{error.code}] {error.message}"
        if source:
            message = f"{message} (source: {source})"

        logger.log(error.level, message)
        if error.surfaced:
            self.notify_once(message, error.level)
        return error

    def notify_once(self, message: str, level: int = logging.INFO) -> bool:
        """Send a message to the user unless it was already sent this session."""
        if message in self._seen:
            return False
        self._seen.add(message)
        if self.notify:
            self.notify(message, level)
        return True

    def reset(self) -> None:
        """Forget previously sent messages."""
        self._seen.clear()
