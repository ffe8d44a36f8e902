# Local application imports
from waterwatch.services.geo.geolocation import (
    ClientReportedPosition,
    GeolocationFailure,
    GeolocationResult,
    IpGeolocationProvider,
    PositionPermissionDenied,
    PositionProvider,
    PositionUnavailable,
    acquire,
    acquire_in_background,
    get_client_ip,
)

__all__ = [
    "ClientReportedPosition",
    "GeolocationFailure",
    "GeolocationResult",
    "IpGeolocationProvider",
    "PositionPermissionDenied",
    "PositionProvider",
    "PositionUnavailable",
    "acquire",
    "acquire_in_background",
    "get_client_ip",
]
