# Local application imports
from waterwatch.core.monitoring.logging import LoggerAdapter, get_contextual_logger, get_logger
from waterwatch.core.monitoring.sentry import _setup_sentry_logging

__all__ = ["LoggerAdapter", "get_contextual_logger", "_setup_sentry_logging", "get_logger"]
