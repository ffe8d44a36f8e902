# Local application imports
from waterwatch.settings.common import CommonSettings


class DevSettings(CommonSettings):
    DEBUG_MODE: bool = True
