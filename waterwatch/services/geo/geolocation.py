"""
Best-effort position acquisition.

``acquire`` races a position provider against a timer. It always resolves: a
missing provider, a denial, a timeout, an unreachable service and an
out-of-range fix all come back as a typed failure so the caller can keep the
default center.
"""

# Standard library imports
import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
import ipaddress
from typing import Any, Protocol

# Third-party imports
from fastapi import Request
import httpx

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.settings import settings
from waterwatch.utils.geo.coordinates import Coordinate, normalize

logger = get_logger(__name__)


class GeolocationFailure(str, Enum):
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    INVALID_POSITION = "invalid_position"
    UNAVAILABLE = "unavailable"


class PositionPermissionDenied(Exception):
    pass


class PositionUnavailable(Exception):
    pass


@dataclass(frozen=True)
class GeolocationResult:
    ok: bool
    coordinate: Coordinate | None = None
    failure: GeolocationFailure | None = None
    detail: str | None = None

    @classmethod
    def success(cls, coordinate: Coordinate) -> "GeolocationResult":
        return cls(ok=True, coordinate=coordinate)

    @classmethod
    def failed(cls, failure: GeolocationFailure, detail: str | None = None) -> "GeolocationResult":
        return cls(ok=False, failure=failure, detail=detail)


class PositionProvider(Protocol):
    async def get_position(self) -> Any: ...


class ClientReportedPosition:
    """A position the browser already resolved and sent along with the request."""

    def __init__(self, lat: float | None = None, lng: float | None = None, denied: bool = False):
        self.lat = lat
        self.lng = lng
        self.denied = denied

    async def get_position(self) -> tuple[float | None, float | None]:
        if self.denied:
            raise PositionPermissionDenied("User denied the location request")
        if self.lat is None or self.lng is None:
            raise PositionUnavailable("Client did not report a position")
        return self.lat, self.lng


FORWARDING_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def get_client_ip(request: Request | None) -> str | None:
    """The caller's address as seen past any reverse proxy, or None when unknown."""
    if request is None:
        return None
    for header in FORWARDING_HEADERS:
        value = request.headers.get(header)
        if value:
            # X-Forwarded-For lists the original client first
            return value.split(",")[0].strip()
    return request.client.host if request.client else None


class IpGeolocationProvider:
    """Looks the caller's IP address up against an ip-api compatible service."""

    def __init__(
        self,
        ip_address: str | None,
        url_template: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.ip_address = ip_address
        self.url_template = url_template or settings.GEOLOCATION_URL
        self._http_client = http_client

    def _lookup_url(self) -> str:
        ip = self.ip_address or ""
        try:
            if ipaddress.ip_address(ip).is_private or ipaddress.ip_address(ip).is_loopback:
                ip = ""
        except ValueError:
            ip = ""
        # An empty address asks the service to locate the requester itself
        return self.url_template.format(ip=ip).rstrip("/")

    async def get_position(self) -> tuple[float, float]:
        url = self._lookup_url()
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PositionUnavailable(f"IP geolocation lookup failed: {e}") from e

        if payload.get("status") != "success":
            raise PositionUnavailable(payload.get("message") or "IP geolocation lookup failed")
        return payload.get("lat"), payload.get("lon")


async def acquire(
    provider: PositionProvider | None,
    timeout_ms: int | None = None,
) -> GeolocationResult:
    """Race ``provider`` against ``timeout_ms``. Never raises."""
    if provider is None:
        return GeolocationResult.failed(GeolocationFailure.UNSUPPORTED, "No position provider available")

    timeout_ms = settings.GEOLOCATION_TIMEOUT_MS if timeout_ms is None else timeout_ms

    try:
        raw = await asyncio.wait_for(provider.get_position(), timeout=timeout_ms / 1000)
    except TimeoutError:
        return GeolocationResult.failed(GeolocationFailure.TIMEOUT, f"No position within {timeout_ms} ms")
    except PositionPermissionDenied as e:
        return GeolocationResult.failed(GeolocationFailure.PERMISSION_DENIED, str(e))
    except PositionUnavailable as e:
        return GeolocationResult.failed(GeolocationFailure.UNAVAILABLE, str(e))
    except Exception as e:
        logger.warning(f"Position provider {type(provider).__name__} failed: {e}")
        return GeolocationResult.failed(GeolocationFailure.UNAVAILABLE, str(e))

    coordinate = normalize(raw)
    if coordinate is None:
        return GeolocationResult.failed(GeolocationFailure.INVALID_POSITION, f"Invalid coordinates {raw!r}")
    return GeolocationResult.success(coordinate)


def acquire_in_background(
    provider: PositionProvider | None,
    on_result: Callable[[GeolocationResult], Awaitable[None]],
    timeout_ms: int | None = None,
) -> asyncio.Task[None]:
    """Schedule ``acquire`` without waiting on it; ``on_result`` receives the outcome."""

    async def runner() -> None:
        result = await acquire(provider, timeout_ms)
        await on_result(result)

    return asyncio.create_task(runner())
