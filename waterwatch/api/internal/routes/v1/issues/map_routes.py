"""
Map sessions: one live ``IssueStore`` per open map view.

A session is created with whatever position the browser resolved. Without
one the server looks the caller up by IP in the background, so the first
snapshot is always served from the default center.
"""

# Third-party imports
from fastapi import APIRouter, Body, Depends, Request

# Local application imports
from waterwatch.api.internal.utils.serializers import (
    default_center,
    issue_view_response,
    render_response,
    snapshot_response,
)
from waterwatch.dependancies.common import get_current_user_optional, get_store_registry
from waterwatch.models.auth.user import User
from waterwatch.schemas.common import BaseResponse
from waterwatch.schemas.issues import (
    CenterUpdate,
    CenterUpdateResponse,
    IssueResponse,
    IssueSelection,
    LayerToggle,
    MapRenderResponse,
    MapSessionCreate,
    MapSnapshotResponse,
    UpvoteResponse,
    ZoomUpdate,
)
from waterwatch.schemas.issues.map_schemas import StatusChange
from waterwatch.services.geo import ClientReportedPosition, PositionProvider
from waterwatch.services.issues import IssueStore, StoreRegistry
from waterwatch.services.map.map_renderer import render
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult

router = APIRouter(prefix="/map/sessions", tags=["Map"])


async def get_map_store(
    session_id: str,
    current_user: User | None = Depends(get_current_user_optional),
    stores: StoreRegistry = Depends(get_store_registry),
) -> IssueStore:
    store = stores.get(session_id, current_user.id if current_user else None)
    if store is None:
        raise ServiceResult.failure(ServiceError.Map.MAP_SESSION_NOT_FOUND).to_http_exception()
    return store


def _client_position(payload: MapSessionCreate) -> ClientReportedPosition | None:
    if payload.location_denied or (payload.latitude is not None and payload.longitude is not None):
        return ClientReportedPosition(payload.latitude, payload.longitude, denied=payload.location_denied)
    return None


@router.post("", response_model=BaseResponse[MapSnapshotResponse], status_code=201)
async def open_map_session(
    request: Request,
    payload: MapSessionCreate | None = Body(None),
    current_user: User | None = Depends(get_current_user_optional),
    stores: StoreRegistry = Depends(get_store_registry),
) -> BaseResponse[MapSnapshotResponse]:
    """Open a map view and load issues, landmarks and weather around the resolved center."""
    payload = payload or MapSessionCreate()
    user_id = current_user.id if current_user else None
    session_id, store = await stores.create(user_id, bool(current_user and current_user.is_admin))

    provider: PositionProvider | None = _client_position(payload)
    if provider is not None:
        await store.initialize(provider, wait_for_position=True)
    else:
        await store.initialize(request.app.state.position_provider_factory(request), wait_for_position=False)

    return BaseResponse.success(snapshot_response(session_id, store.snapshot()))


@router.get("/{session_id}", response_model=BaseResponse[MapSnapshotResponse])
async def get_map_snapshot(
    session_id: str, store: IssueStore = Depends(get_map_store)
) -> BaseResponse[MapSnapshotResponse]:
    return BaseResponse.success(snapshot_response(session_id, store.snapshot()))


@router.get("/{session_id}/markers", response_model=BaseResponse[MapRenderResponse])
async def get_map_markers(
    store: IssueStore = Depends(get_map_store),
    current_user: User | None = Depends(get_current_user_optional),
) -> BaseResponse[MapRenderResponse]:
    """Markers for the visible layers. Issue popups prompt anonymous viewers to sign in."""
    rendered = render(store.snapshot(), default_center(), is_authenticated=current_user is not None)
    return BaseResponse.success(render_response(rendered))


@router.post("/{session_id}/refresh", response_model=BaseResponse[MapSnapshotResponse])
async def refresh_map(session_id: str, store: IssueStore = Depends(get_map_store)) -> BaseResponse[MapSnapshotResponse]:
    await store.fetch()
    return BaseResponse.success(snapshot_response(session_id, store.snapshot()))


@router.put("/{session_id}/center", response_model=BaseResponse[CenterUpdateResponse])
async def move_map_center(
    payload: CenterUpdate, store: IssueStore = Depends(get_map_store)
) -> BaseResponse[CenterUpdateResponse]:
    """An invalid pair is reported as not accepted and the center stays where it was."""
    accepted = store.set_center(payload.center)
    if accepted:
        await store.fetch()
    return BaseResponse.success(CenterUpdateResponse(accepted=accepted, center=(store.center.lat, store.center.lng)))


@router.put("/{session_id}/zoom", response_model=BaseResponse[dict])
async def set_map_zoom(payload: ZoomUpdate, store: IssueStore = Depends(get_map_store)) -> BaseResponse[dict]:
    return BaseResponse.success({"zoom": store.set_zoom(payload.zoom)})


@router.put("/{session_id}/layers", response_model=BaseResponse[dict[str, bool]])
async def toggle_map_layer(
    payload: LayerToggle, store: IssueStore = Depends(get_map_store)
) -> BaseResponse[dict[str, bool]]:
    return BaseResponse.success(store.toggle_layer(payload.name, payload.visible))


@router.put("/{session_id}/selection", response_model=BaseResponse[IssueResponse | None])
async def select_map_issue(
    payload: IssueSelection, store: IssueStore = Depends(get_map_store)
) -> BaseResponse[IssueResponse | None]:
    if not store.select_issue(payload.issue_id):
        ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND).unwrap()
    selected = store.snapshot().selected_issue
    return BaseResponse.success(issue_view_response(selected) if selected else None)


@router.post("/{session_id}/issues/{issue_id}/upvote", response_model=BaseResponse[UpvoteResponse])
async def toggle_map_upvote(issue_id: str, store: IssueStore = Depends(get_map_store)) -> BaseResponse[UpvoteResponse]:
    """Anonymous sessions get ``sign_in_required`` and nothing is written."""
    outcome = (await store.toggle_upvote(issue_id)).unwrap()
    return BaseResponse.success(
        UpvoteResponse(issue_id=str(outcome.issue_id), has_upvoted=outcome.has_upvoted, upvote_count=outcome.upvote_count)
    )


@router.patch("/{session_id}/issues/{issue_id}/status", response_model=BaseResponse[IssueResponse])
async def change_map_issue_status(
    issue_id: str, payload: StatusChange, store: IssueStore = Depends(get_map_store)
) -> BaseResponse[IssueResponse]:
    (await store.update_status(issue_id, payload.status)).unwrap()
    issue = store.find_issue(issue_id)
    if issue is None:
        ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND).unwrap()
    return BaseResponse.success(issue_view_response(issue))  # type: ignore[arg-type]


@router.delete("/{session_id}", response_model=BaseResponse[dict])
async def close_map_session(
    session_id: str,
    store: IssueStore = Depends(get_map_store),  # noqa
    stores: StoreRegistry = Depends(get_store_registry),
) -> BaseResponse[dict]:
    await stores.close(session_id)
    return BaseResponse.success({"session_id": session_id, "closed": True})
