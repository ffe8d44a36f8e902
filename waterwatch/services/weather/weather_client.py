# Standard library imports
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

# Third-party imports
import httpx

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.settings import settings
from waterwatch.utils.geo.coordinates import Coordinate

logger = get_logger(__name__)


class WeatherUnavailable(Exception):
    """Raised when current conditions cannot be fetched. The message is user-facing."""


@dataclass(frozen=True)
class WeatherData:
    location: Coordinate
    temperature: float
    condition: str
    humidity: float
    rainfall: float
    alerts: list[str] = field(default_factory=list)
    updated_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())


class WeatherClient:
    """OpenWeather client for current conditions and active alerts."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENWEATHER_API_KEY
        self.base_url = (base_url or settings.OPENWEATHER_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.WEATHER_TIMEOUT_SECONDS
        self._http_client = http_client

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, url: str, params: dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(url, params=params, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params)

    @staticmethod
    def _status_error(what: str, response: httpx.Response) -> str:
        try:
            message = response.json().get("message")
        except ValueError:
            message = None
        detail = f"Failed to fetch {what}: {response.status_code} {response.reason_phrase}"
        return f"{detail} - {message}" if message else detail

    async def current(self, lat: float, lng: float) -> WeatherData:
        """Current conditions at the point, with any active alerts attached."""
        if not self.api_key:
            raise WeatherUnavailable("Weather data is unavailable: the OpenWeather API key is not configured")

        params = {"lat": lat, "lon": lng, "appid": self.api_key, "units": "metric"}
        try:
            response = await self._get(f"{self.base_url}/weather", params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Weather API returned {exc.response.status_code}: {exc.response.text}")
            raise WeatherUnavailable(self._status_error("weather data", exc.response)) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Weather API error: {exc}")
            raise WeatherUnavailable("Failed to fetch weather data. Please try again later.") from exc

        weather = self._parse(payload, Coordinate(lat, lng))
        return replace(weather, alerts=await self.alerts(lat, lng))

    async def alerts(self, lat: float, lng: float) -> list[str]:
        """Event names of active alerts. Alerts are auxiliary, so a failed lookup gives none."""
        params = {"lat": lat, "lon": lng, "appid": self.api_key, "exclude": "current,minutely,hourly,daily"}
        try:
            response = await self._get(f"{self.base_url}/onecall", params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(self._status_error("weather alerts", exc.response))
            return []
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Weather alerts API error: {exc}")
            return []
        return [str(alert.get("event", "")) for alert in payload.get("alerts") or [] if alert.get("event")]

    @staticmethod
    def _parse(payload: dict[str, Any], location: Coordinate) -> WeatherData:
        main = payload.get("main") or {}
        conditions = payload.get("weather") or [{}]
        rain = payload.get("rain") or {}
        return WeatherData(
            location=location,
            temperature=float(main.get("temp", 0.0)),
            condition=str(conditions[0].get("main", "Unknown")),
            humidity=float(main.get("humidity", 0.0)),
            rainfall=float(rain.get("1h", 0.0)),
        )
