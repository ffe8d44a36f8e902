"""
Per-session geospatial issue state.

An ``IssueStore`` backs one map view: the issue list with per-user upvote
flags, landmark markers, weather, the viewport and the selected issue. It
loads through an ``IssueSource`` and re-fetches the whole list on every change
event instead of patching rows, which keeps it simple for the expected volumes
(tens to low hundreds of issues).

States::

    uninitialized -> loading -> ready <-> error
    any -> closed

Every fetch is tagged with a sequence number. A response older than the last
applied one is dropped, as is anything that resolves after ``close()``.
"""

# Standard library imports
import asyncio
from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Any
from uuid import UUID

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.core.realtime import ChangeEvent, Subscription
from waterwatch.models.issues.water_issue import WaterIssue
from waterwatch.services.geo.geolocation import (
    GeolocationFailure,
    GeolocationResult,
    PositionProvider,
    acquire,
    acquire_in_background,
)
from waterwatch.services.issues.issue_source import IssueSource, IssueSourceError
from waterwatch.services.issues.issue_views import WaterIssueView, parse_issue_row
from waterwatch.services.issues.upvote_reconciler import UpvoteOutcome
from waterwatch.services.map.landmarks import Authority, LandmarkSource, Reservoir, StaticLandmarkSource
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult
from waterwatch.services.weather.weather_client import WeatherClient, WeatherData, WeatherUnavailable
from waterwatch.settings import settings
from waterwatch.utils.geo.coordinates import Coordinate, is_finite_number, normalize

MIN_ZOOM = 0
MAX_ZOOM = 20

DEFAULT_LAYERS = {
    "issues": True,
    "authorities": True,
    "reservoirs": True,
    "weather": False,
}


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    CLOSED = "closed"


@dataclass(frozen=True)
class StoreSnapshot:
    state: StoreState
    center: Coordinate
    zoom: int
    visible_layers: dict[str, bool]
    selected_issue_id: str | None
    issues: tuple[WaterIssueView, ...]
    authorities: tuple[Authority, ...]
    reservoirs: tuple[Reservoir, ...]
    weather: WeatherData | None
    weather_error: str | None
    error: str | None
    is_loading: bool
    geolocation_failure: GeolocationFailure | None
    user_id: str | None
    sequence: int = 0
    degraded_issue_ids: tuple[str, ...] = field(default=())

    @property
    def selected_issue(self) -> WaterIssueView | None:
        if self.selected_issue_id is None:
            return None
        return next((issue for issue in self.issues if issue.id == self.selected_issue_id), None)


class IssueStore:
    def __init__(
        self,
        source: IssueSource,
        user_id: UUID | None = None,
        is_admin: bool = False,
        weather_client: WeatherClient | None = None,
        landmarks: LandmarkSource | None = None,
        default_center: Coordinate | None = None,
        default_zoom: int | None = None,
        geolocation_timeout_ms: int | None = None,
    ):
        self._source = source
        self.user_id = user_id
        self.is_admin = is_admin
        self._weather_client = weather_client or WeatherClient()
        self._landmarks = landmarks or StaticLandmarkSource()

        self.default_center = normalize(default_center or settings.DEFAULT_CENTER) or Coordinate(28.6139, 77.209)
        self.default_zoom = settings.DEFAULT_ZOOM if default_zoom is None else default_zoom
        self.geolocation_timeout_ms = (
            settings.GEOLOCATION_TIMEOUT_MS if geolocation_timeout_ms is None else geolocation_timeout_ms
        )

        self.state = StoreState.UNINITIALIZED
        self.center: Coordinate = self.default_center
        self.zoom: int = self.default_zoom
        self.visible_layers: dict[str, bool] = dict(DEFAULT_LAYERS)
        self.selected_issue_id: str | None = None

        self.issues: list[WaterIssueView] = []
        self.authorities: list[Authority] = []
        self.reservoirs: list[Reservoir] = []
        self.weather: WeatherData | None = None
        self.weather_error: str | None = None
        self.error: str | None = None
        self.is_loading = False
        self.geolocation_failure: GeolocationFailure | None = None

        self._sequence = 0
        self._applied_sequence = 0
        self._in_flight = 0
        self._subscription: Subscription | None = None
        self._geolocation_task: asyncio.Task[None] | None = None

        self.logger = get_contextual_logger(__name__, user_id=user_id)

    # ---- lifecycle ---------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self.state == StoreState.CLOSED

    async def initialize(self, provider: PositionProvider | None = None, wait_for_position: bool = True) -> None:
        """
        Pick the initial center, load everything and start listening for changes.

        The default center is in place before anything is awaited. With
        ``wait_for_position`` the geolocation race (bounded by the timeout)
        finishes before the first fetch; otherwise it runs in the background
        and a later fix moves the center and re-fetches.
        """
        if self.state not in (StoreState.UNINITIALIZED, StoreState.ERROR):
            return

        self.state = StoreState.LOADING
        self.is_loading = True
        self.error = None
        self.center = self.default_center

        if wait_for_position:
            self._apply_position(await acquire(provider, self.geolocation_timeout_ms))
            if self.closed:
                return
        else:
            self._geolocation_task = acquire_in_background(
                provider, self._on_background_position, self.geolocation_timeout_ms
            )

        await self.fetch()
        if self.closed:
            return

        if self._subscription is None:
            self._subscription = await self._source.change_feed.subscribe(WaterIssue.__tablename__, self._on_change)
            if self.closed:
                await self._subscription.unsubscribe()
                self._subscription = None

    def _apply_position(self, result: GeolocationResult) -> bool:
        if result.ok and result.coordinate is not None and self.set_center(result.coordinate):
            self.geolocation_failure = None
            return True
        self.geolocation_failure = result.failure
        self.logger.info(f"Geolocation failed ({result.failure}): {result.detail}; keeping {self.center}")
        return False

    async def _on_background_position(self, result: GeolocationResult) -> None:
        if self.closed:
            return
        if self._apply_position(result):
            await self.fetch()

    async def _on_change(self, event: ChangeEvent) -> None:
        self.logger.debug(f"Change on {event.table}: {event.event_type} {event.record_id}")
        await self.fetch()

    async def close(self) -> None:
        """Stop listening. Results of work still in flight are discarded."""
        if self.closed:
            return
        self.state = StoreState.CLOSED
        self.is_loading = False
        if self._geolocation_task is not None and not self._geolocation_task.done():
            self._geolocation_task.cancel()
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None

    # ---- loading -----------------------------------------------------------

    async def fetch(self) -> bool:
        """
        Reload issues, upvote flags, landmarks and weather for the current
        center. Safe to call concurrently; returns True when this call's
        result was applied.
        """
        if self.closed:
            return False

        self._sequence += 1
        sequence = self._sequence
        center = self.center
        self._in_flight += 1
        self.is_loading = True

        try:
            try:
                rows = await self._source.list_issue_rows()
                upvoted = await self._source.upvoted_issue_ids(self.user_id) if self.user_id else set()
            except IssueSourceError as e:
                if self._is_stale(sequence):
                    return False
                self.error = str(e)
                self.state = StoreState.ERROR
                self._applied_sequence = sequence
                self.logger.warning(f"Fetch #{sequence} failed: {e}")
                return False

            weather: WeatherData | None = None
            weather_error: str | None = None
            try:
                weather = await self._weather_client.current(center.lat, center.lng)
            except WeatherUnavailable as e:
                weather_error = str(e)

            if self._is_stale(sequence):
                self.logger.debug(f"Discarding stale fetch #{sequence} (applied #{self._applied_sequence})")
                return False

            issues = []
            for row in rows:
                issue = parse_issue_row(row, center, upvoted)
                if issue is not None:
                    issues.append(issue)

            self.issues = issues
            self.authorities = self._landmarks.authorities_near(center)
            self.reservoirs = self._landmarks.reservoirs_near(center)
            self.weather = weather
            self.weather_error = weather_error
            self.error = None
            self.state = StoreState.READY
            self._applied_sequence = sequence

            if self.selected_issue_id is not None and self.find_issue(self.selected_issue_id) is None:
                self.selected_issue_id = None
            return True
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and not self.closed:
                self.is_loading = False

    def _is_stale(self, sequence: int) -> bool:
        return self.closed or sequence < self._applied_sequence

    # ---- mutations ---------------------------------------------------------

    def find_issue(self, issue_id: str | UUID) -> WaterIssueView | None:
        key = str(issue_id)
        return next((issue for issue in self.issues if issue.id == key), None)

    async def toggle_upvote(self, issue_id: str | UUID) -> ServiceResult[UpvoteOutcome]:
        """Add or remove the current user's upvote, then re-fetch everything."""
        if self.user_id is None:
            return ServiceResult.failure(ServiceError.Auth.SIGN_IN_REQUIRED)
        if self.closed:
            return ServiceResult.failure(ServiceError.Map.STORE_CLOSED)

        issue = self.find_issue(issue_id)
        if issue is None:
            return ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND)

        result = await self._source.toggle_upvote(UUID(issue.id), self.user_id, issue.has_upvoted)
        if result.ok:
            await self.fetch()
        return result

    async def update_status(self, issue_id: str | UUID, status: str) -> ServiceResult[Any]:
        if self.user_id is None:
            return ServiceResult.failure(ServiceError.Auth.SIGN_IN_REQUIRED)
        if not self.is_admin:
            return ServiceResult.failure(ServiceError.Auth.ADMIN_REQUIRED)
        if self.closed:
            return ServiceResult.failure(ServiceError.Map.STORE_CLOSED)

        issue = self.find_issue(issue_id)
        if issue is None:
            return ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND)

        result = await self._source.update_status(UUID(issue.id), status)
        if result.ok:
            await self.fetch()
        return result

    def set_center(self, pair: Any) -> bool:
        """Store a normalized center; False (state untouched) for an invalid pair."""
        center = normalize(pair)
        if center is None:
            self.logger.warning(f"Rejected invalid center {pair!r}")
            return False
        self.center = center
        return True

    def set_zoom(self, value: Any) -> int:
        """Round a valid zoom, fall back to the default otherwise. Never raises."""
        if not is_finite_number(value) or not MIN_ZOOM <= value <= MAX_ZOOM:
            self.logger.warning(f"Invalid zoom level {value!r}, using {self.default_zoom}")
            self.zoom = self.default_zoom
        else:
            self.zoom = math.floor(value + 0.5)
        return self.zoom

    def toggle_layer(self, name: str, visible: bool) -> dict[str, bool]:
        self.visible_layers = {**self.visible_layers, name: bool(visible)}
        return dict(self.visible_layers)

    def select_issue(self, issue_id: str | UUID | None) -> bool:
        if issue_id is None:
            self.selected_issue_id = None
            return True
        issue = self.find_issue(issue_id)
        if issue is None:
            return False
        self.selected_issue_id = issue.id
        return True

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            state=self.state,
            center=self.center,
            zoom=self.zoom,
            visible_layers=dict(self.visible_layers),
            selected_issue_id=self.selected_issue_id,
            issues=tuple(self.issues),
            authorities=tuple(self.authorities),
            reservoirs=tuple(self.reservoirs),
            weather=self.weather,
            weather_error=self.weather_error,
            error=self.error,
            is_loading=self.is_loading,
            geolocation_failure=self.geolocation_failure,
            user_id=str(self.user_id) if self.user_id else None,
            sequence=self._applied_sequence,
            degraded_issue_ids=tuple(issue.id for issue in self.issues if issue.location_degraded),
        )
