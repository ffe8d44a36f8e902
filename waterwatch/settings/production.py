# Local application imports
from waterwatch.settings.common import CommonSettings


class ProductionSettings(CommonSettings):
    DEBUG_MODE: bool = False
    SENTRY_DSN: str | None = None
