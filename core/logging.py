"""Logging setup."""

import logging
from typing import Optional, Union

LOGGER_NAME = "cli_ai_suggest"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: Union[int, str] = "WARNING", stream=None) -> logging.Logger:
    """
    Configure the root logger for command line use.

    Args:
        level: Level name or number.
        stream: Optional stream for the handler (defaults to stderr).

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        resolved: Optional[int] = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    else:
        resolved = level

    logging.basicConfig(level=resolved, format=LOG_FORMAT, stream=stream, force=True)
    logger.setLevel(resolved)
    return logger
