"""
Latitude/longitude validation and normalization.

Everything in this module is total: malformed input produces ``False``, ``None``
or a failed :class:`LocationParseResult`, never an exception, because these
helpers sit on map rendering paths where one bad row must not take the view
down.
"""

# Standard library imports
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import math
from numbers import Real
from typing import Any, NamedTuple

# ~0.1 m at the equator
COORDINATE_PRECISION = 6

_OPENERS = "(["
_CLOSERS = ")]"


class Coordinate(NamedTuple):
    """A latitude-first coordinate pair."""

    lat: float
    lng: float


@dataclass(frozen=True)
class LocationParseResult:
    ok: bool
    coordinate: Coordinate | None = None
    error: str | None = None

    @classmethod
    def success(cls, coordinate: Coordinate) -> "LocationParseResult":
        return cls(ok=True, coordinate=coordinate)

    @classmethod
    def failure(cls, error: str) -> "LocationParseResult":
        return cls(ok=False, error=error)


def is_finite_number(value: Any) -> bool:
    """True for a real, non-bool number that fits a float and is finite."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def validate(value: Any) -> bool:
    """True iff ``value`` is a finite ``(lat, lng)`` pair within range."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return False
    if len(value) != 2:
        return False

    lat, lng = value
    if not (is_finite_number(lat) and is_finite_number(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def normalize(pair: Any) -> Coordinate | None:
    """Round a valid pair to 6 decimal digits; ``None`` for an invalid one."""
    if not validate(pair):
        return None
    lat, lng = pair
    return Coordinate(round(float(lat), COORDINATE_PRECISION), round(float(lng), COORDINATE_PRECISION))


def _parse_point_string(raw: str) -> LocationParseResult:
    text = raw.strip()
    if len(text) < 2 or text[0] not in _OPENERS or text[-1] not in _CLOSERS:
        return LocationParseResult.failure(f"unrecognised point string {raw!r}")

    parts = text[1:-1].split(",")
    if len(parts) != 2:
        return LocationParseResult.failure(f"expected two components in {raw!r}")

    try:
        lng, lat = (float(part) for part in parts)
    except ValueError:
        return LocationParseResult.failure(f"non-numeric component in {raw!r}")

    # Point strings are longitude first
    coordinate = normalize((lat, lng))
    if coordinate is None:
        return LocationParseResult.failure(f"out of range point {raw!r}")
    return LocationParseResult.success(coordinate)


def parse_location(raw: Any) -> LocationParseResult:
    """
    Parse a location as it arrives from storage or from a client.

    Accepted shapes:
        - point string ``"(lng,lat)"`` or ``"[lng,lat]"``; the order is
          reversed to latitude first
        - numeric pair, already latitude first
        - mapping with ``lat``/``lng`` or ``latitude``/``longitude`` keys
    """
    if isinstance(raw, str):
        return _parse_point_string(raw)

    if isinstance(raw, Mapping):
        lat = raw.get("lat", raw.get("latitude"))
        lng = raw.get("lng", raw.get("longitude"))
        raw = (lat, lng)

    coordinate = normalize(raw)
    if coordinate is None:
        return LocationParseResult.failure(f"invalid coordinate pair {raw!r}")
    return LocationParseResult.success(coordinate)


def coerce_location(raw: Any, fallback: Coordinate) -> tuple[Coordinate, bool]:
    """
    Parse ``raw`` or fall back. Returns ``(coordinate, degraded)`` where
    ``degraded`` is True when the fallback was substituted.
    """
    result = parse_location(raw)
    if result.ok and result.coordinate is not None:
        return result.coordinate, False
    return fallback, True


def format_location(coordinate: Sequence[float]) -> str:
    """Serialize a latitude-first pair to the stored ``"(lng,lat)"`` form."""
    lat, lng = coordinate
    return f"({lng},{lat})"
