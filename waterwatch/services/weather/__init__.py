# Local application imports
from waterwatch.services.weather.weather_client import WeatherClient, WeatherData, WeatherUnavailable

__all__ = ["WeatherClient", "WeatherData", "WeatherUnavailable"]
