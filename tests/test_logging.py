# Standard library imports
import logging

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger, get_logger
from waterwatch.core.monitoring.logging import ConsoleFormatter


def test_contextual_logger_appends_context(caplog):
    logger = get_contextual_logger("waterwatch.tests.context", user_id="u-1", session_id=None)

    with caplog.at_level(logging.INFO, logger="waterwatch.tests.context"):
        logger.info("Report stored")

    assert caplog.messages == ["Report stored [user_id=u-1]"]


def test_contextual_logger_without_context_leaves_message_alone(caplog):
    logger = get_contextual_logger("waterwatch.tests.plain", user_id=None)

    with caplog.at_level(logging.INFO, logger="waterwatch.tests.plain"):
        logger.info("Map session opened")

    assert caplog.messages == ["Map session opened"]


def test_get_logger_attaches_one_handler():
    first = get_logger("waterwatch.tests.handlers")
    second = get_logger("waterwatch.tests.handlers")
    assert first is second
    assert len(first.handlers) == 1


def test_console_formatter_colours_only_when_asked():
    record = logging.LogRecord("waterwatch", logging.ERROR, __file__, 1, "boom", None, None)

    assert "\x1b[" in ConsoleFormatter(use_colour=True).format(record)
    assert "\x1b[" not in ConsoleFormatter(use_colour=False).format(record)
