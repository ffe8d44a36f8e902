# Standard library imports
from collections.abc import MutableMapping
from functools import lru_cache
import logging
import sys
from typing import Any

# Local application imports
from waterwatch.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ANSI colours per level
LEVEL_COLOURS = {
    logging.DEBUG: "\x1b[38;20m",
    logging.INFO: "\x1b[38;20m",
    logging.WARNING: "\x1b[33;20m",
    logging.ERROR: "\x1b[31;20m",
    logging.CRITICAL: "\x1b[31;1m",
}
RESET = "\x1b[0m"


class ConsoleFormatter(logging.Formatter):
    """
    Colours records by level when writing to a terminal, plain text otherwise.
    """

    def __init__(self, use_colour: bool | None = None):
        super().__init__(LOG_FORMAT)
        if use_colour is None:
            use_colour = sys.stdout.isatty()
        self._level_formatters = (
            {level: logging.Formatter(f"{colour}{LOG_FORMAT}{RESET}") for level, colour in LEVEL_COLOURS.items()}
            if use_colour
            else {}
        )

    def format(self, record: logging.LogRecord) -> str:
        formatter = self._level_formatters.get(record.levelno)
        if formatter is None:
            return super().format(record)
        return formatter.format(record)


@lru_cache
def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a logger with the given name and a stdout handler attached once.

    In production the Sentry logging integration (see ``sentry.py``) picks up
    warnings as breadcrumbs and errors as events from the same loggers.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if level is None:
        level = logging.DEBUG if settings.DEBUG_MODE else logging.INFO
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ConsoleFormatter())
    logger.addHandler(handler)
    return logger


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """
    Appends ``key=value`` context to every message. Context entries that are
    None (an anonymous user, say) are left out.
    """

    def __init__(self, logger: logging.Logger, extra: dict[str, Any] | None = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        context = " ".join(f"{key}={value}" for key, value in (self.extra or {}).items() if value is not None)
        if context:
            msg = f"{msg} [{context}]"
        return msg, kwargs


def get_contextual_logger(name: str, **context: Any) -> LoggerAdapter:
    """``get_contextual_logger(__name__, session_id=..., user_id=...)``"""
    return LoggerAdapter(get_logger(name), context)
