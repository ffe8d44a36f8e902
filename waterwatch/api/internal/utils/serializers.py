"""
Builders that turn service-layer objects into response schemas.

Enum values are unwrapped here so every payload carries plain strings.
"""

# Standard library imports
from enum import Enum
from typing import Any

# Local application imports
from waterwatch.models.issues.water_issue import WaterIssue
from waterwatch.schemas.chat.chat_schemas import (
    ChatErrorResponse,
    ChatMessageResponse,
    ConversationResponse,
    QuickActionResponse,
)
from waterwatch.schemas.issues.issue_schemas import IssueResponse
from waterwatch.schemas.issues.map_schemas import (
    AuthorityResponse,
    MapRenderResponse,
    MapSnapshotResponse,
    MarkerResponse,
    ReservoirResponse,
    WeatherResponse,
)
from waterwatch.services.chat.assistant import ChatAssistant, ChatMessage
from waterwatch.services.issues.issue_store import StoreSnapshot
from waterwatch.services.issues.issue_views import WaterIssueView, issue_to_row, parse_issue_row
from waterwatch.services.map.map_renderer import MapRender
from waterwatch.settings import settings
from waterwatch.utils.geo.coordinates import Coordinate, normalize


def _value(item: Any) -> Any:
    return item.value if isinstance(item, Enum) else item


def _pair(coordinate: Coordinate) -> tuple[float, float]:
    return (coordinate.lat, coordinate.lng)


def default_center() -> Coordinate:
    return normalize(settings.DEFAULT_CENTER) or Coordinate(28.6139, 77.209)


def issue_view_response(issue: WaterIssueView) -> IssueResponse:
    return IssueResponse(
        id=issue.id,
        location=_pair(issue.location),
        location_degraded=issue.location_degraded,
        issue_type=issue.issue_type,
        description=issue.description,
        severity=issue.severity,
        status=issue.status,
        user_id=issue.user_id,
        upvote_count=issue.upvote_count,
        has_upvoted=issue.has_upvoted,
        created_at=issue.created_at,
        updated_at=issue.updated_at,
    )


def issue_response(issue: WaterIssue, upvoted_ids: set[str] | frozenset[str] = frozenset()) -> IssueResponse:
    """Serialize a stored issue through the same parse boundary the map uses."""
    view = parse_issue_row(issue_to_row(issue), default_center(), upvoted_ids)
    if view is None:
        raise ValueError(f"Issue {issue.id!r} has no id")
    return issue_view_response(view)


def snapshot_response(session_id: str, snapshot: StoreSnapshot) -> MapSnapshotResponse:
    weather = snapshot.weather
    return MapSnapshotResponse(
        session_id=session_id,
        state=_value(snapshot.state),
        center=_pair(snapshot.center),
        zoom=snapshot.zoom,
        visible_layers=dict(snapshot.visible_layers),
        selected_issue_id=snapshot.selected_issue_id,
        issues=[issue_view_response(issue) for issue in snapshot.issues],
        authorities=[
            AuthorityResponse(
                id=authority.id,
                name=authority.name,
                location=_pair(authority.location),
                type=authority.type,
                phone=authority.phone,
            )
            for authority in snapshot.authorities
        ],
        reservoirs=[
            ReservoirResponse(
                id=reservoir.id,
                name=reservoir.name,
                location=_pair(reservoir.location),
                capacity=reservoir.capacity,
                current_level=reservoir.current_level,
                fill_percentage=reservoir.fill_percentage,
            )
            for reservoir in snapshot.reservoirs
        ],
        weather=(
            WeatherResponse(
                location=_pair(weather.location),
                temperature=weather.temperature,
                condition=weather.condition,
                humidity=weather.humidity,
                rainfall=weather.rainfall,
                alerts=list(weather.alerts),
                updated_at=weather.updated_at,
            )
            if weather is not None
            else None
        ),
        weather_error=snapshot.weather_error,
        error=snapshot.error,
        is_loading=snapshot.is_loading,
        geolocation_failure=_value(snapshot.geolocation_failure),
    )


def render_response(rendered: MapRender) -> MapRenderResponse:
    return MapRenderResponse(
        center=_pair(rendered.center),
        zoom=rendered.zoom,
        layers={
            layer: [
                MarkerResponse(
                    id=marker.id,
                    layer=marker.layer,
                    position=_pair(marker.position),
                    title=marker.title,
                    degraded=marker.degraded,
                    popup=dict(marker.popup),
                )
                for marker in markers
            ]
            for layer, markers in rendered.layers.items()
        },
        selected_issue_id=rendered.selected_issue_id,
        error=rendered.error,
    )


def message_response(message: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=message.id,
        role=message.role,
        content=message.content,
        status=_value(message.status),
        timestamp=message.timestamp,
    )


def conversation_response(assistant: ChatAssistant) -> ConversationResponse:
    return ConversationResponse(
        id=assistant.id,
        state=_value(assistant.state),
        messages=[message_response(message) for message in assistant.messages],
        error=(
            ChatErrorResponse(kind=_value(assistant.error.kind), message=assistant.error.message)
            if assistant.error is not None
            else None
        ),
        quick_actions=[
            QuickActionResponse(id=action.id, label=action.label, query=action.query, category=action.category)
            for action in assistant.quick_actions
        ],
        draft=assistant.draft,
    )
