# Standard library imports
import logging

# Third-party imports
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

# Local application imports
from waterwatch.settings import settings


def _setup_sentry_logging() -> None:
    """
    Initialise Sentry with the logging integration when running in production
    with a DSN configured. Warnings become breadcrumbs, errors become events.
    """
    if settings.ENVIRONMENT == "production" and settings.SENTRY_DSN:
        sentry_logging = LoggingIntegration(
            level=logging.WARNING,
            event_level=logging.ERROR,
        )

        if not sentry_sdk.get_client().is_active():
            sentry_sdk.init(
                dsn=settings.SENTRY_DSN,
                integrations=[sentry_logging],
                environment=settings.ENVIRONMENT,
                traces_sample_rate=0.2,
            )


# Call setup once at module import time
_setup_sentry_logging()
