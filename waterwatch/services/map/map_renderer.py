"""
Marker placement for the map view.

The renderer only reads a ``StoreSnapshot``. Every location is validated
before it becomes a marker; an unusable one is pinned at the fallback center
and flagged ``degraded`` so one bad row never blanks the map.
"""

# Standard library imports
from dataclasses import dataclass, field
from typing import Any, Literal

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.services.issues.issue_store import StoreSnapshot
from waterwatch.utils.geo.coordinates import Coordinate, coerce_location

logger = get_logger(__name__)

SIGN_IN_PROMPT = "Sign in to upvote this issue"

UpvoteAction = Literal["toggle", "sign_in"]


@dataclass(frozen=True)
class Marker:
    id: str
    layer: str
    position: Coordinate
    title: str
    degraded: bool = False
    popup: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MapRender:
    center: Coordinate
    zoom: int
    layers: dict[str, list[Marker]] = field(default_factory=dict)
    selected_issue_id: str | None = None
    error: str | None = None

    @property
    def marker_count(self) -> int:
        return sum(len(markers) for markers in self.layers.values())


def _issue_markers(snapshot: StoreSnapshot, fallback: Coordinate, is_authenticated: bool) -> list[Marker]:
    markers = []
    upvote_action: UpvoteAction = "toggle" if is_authenticated else "sign_in"
    for issue in snapshot.issues:
        position, degraded = coerce_location(issue.location, fallback)
        markers.append(
            Marker(
                id=issue.id,
                layer="issues",
                position=position,
                title=issue.issue_type,
                degraded=degraded or issue.location_degraded,
                popup={
                    "description": issue.description,
                    "severity": issue.severity,
                    "status": issue.status,
                    "upvote_count": issue.upvote_count,
                    "has_upvoted": issue.has_upvoted,
                    "upvote_action": upvote_action,
                    "sign_in_prompt": None if is_authenticated else SIGN_IN_PROMPT,
                    "selected": issue.id == snapshot.selected_issue_id,
                },
            )
        )
    return markers


def _authority_markers(snapshot: StoreSnapshot, fallback: Coordinate) -> list[Marker]:
    markers = []
    for authority in snapshot.authorities:
        position, degraded = coerce_location(authority.location, fallback)
        markers.append(
            Marker(
                id=authority.id,
                layer="authorities",
                position=position,
                title=authority.name,
                degraded=degraded,
                popup={"type": authority.type, "phone": authority.phone},
            )
        )
    return markers


def _reservoir_markers(snapshot: StoreSnapshot, fallback: Coordinate) -> list[Marker]:
    markers = []
    for reservoir in snapshot.reservoirs:
        position, degraded = coerce_location(reservoir.location, fallback)
        markers.append(
            Marker(
                id=reservoir.id,
                layer="reservoirs",
                position=position,
                title=reservoir.name,
                degraded=degraded,
                popup={
                    "capacity": reservoir.capacity,
                    "current_level": reservoir.current_level,
                    "fill_percentage": reservoir.fill_percentage,
                },
            )
        )
    return markers


def _weather_markers(snapshot: StoreSnapshot, fallback: Coordinate) -> list[Marker]:
    if snapshot.weather is None:
        return []
    weather = snapshot.weather
    position, degraded = coerce_location(weather.location, fallback)
    return [
        Marker(
            id="weather",
            layer="weather",
            position=position,
            title=weather.condition,
            degraded=degraded,
            popup={
                "temperature": weather.temperature,
                "humidity": weather.humidity,
                "rainfall": weather.rainfall,
                "alerts": list(weather.alerts),
                "updated_at": weather.updated_at,
            },
        )
    ]


def render(snapshot: StoreSnapshot, fallback_center: Coordinate, is_authenticated: bool) -> MapRender:
    """
    Build marker groups for the visible layers. A failure while rendering is
    reported on ``MapRender.error`` with no markers instead of propagating.
    """
    center, _ = coerce_location(snapshot.center, fallback_center)
    try:
        builders = {
            "issues": lambda: _issue_markers(snapshot, center, is_authenticated),
            "authorities": lambda: _authority_markers(snapshot, center),
            "reservoirs": lambda: _reservoir_markers(snapshot, center),
            "weather": lambda: _weather_markers(snapshot, center),
        }
        layers = {
            name: builder()
            for name, builder in builders.items()
            if snapshot.visible_layers.get(name, False)
        }
    except Exception:
        logger.exception("Map rendering failed")
        return MapRender(
            center=center,
            zoom=snapshot.zoom,
            selected_issue_id=snapshot.selected_issue_id,
            error="The map could not be displayed. Please refresh the page.",
        )

    return MapRender(center=center, zoom=snapshot.zoom, layers=layers, selected_issue_id=snapshot.selected_issue_id)
