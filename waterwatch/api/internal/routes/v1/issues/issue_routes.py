# Standard library imports
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.api.internal.utils.serializers import issue_response
from waterwatch.core.backend import BackendClient
from waterwatch.core.db import get_async_session
from waterwatch.db_selectors.issues import list_issues
from waterwatch.db_selectors.upvotes import get_upvote, list_upvoted_issue_ids
from waterwatch.dependancies.common import get_backend, get_current_user, get_current_user_optional, require_admin
from waterwatch.models.auth.user import User
from waterwatch.schemas.common import BaseResponse
from waterwatch.schemas.issues import IssueCreate, IssueResponse, IssueStats, StatusUpdate, UpvoteResponse
from waterwatch.services.issues.report_services import list_my_reports, submit_report
from waterwatch.services.issues.triage import (
    ALL_STATUSES,
    filter_by_status,
    issue_type_counts,
    resolution_rate,
    sort_for_triage,
    status_counts,
    update_status,
)
from waterwatch.services.issues.upvote_reconciler import toggle_upvote

router = APIRouter(prefix="/issues", tags=["Issues"])


async def _upvoted_ids(db: AsyncSession, user: User | None) -> set[str]:
    if user is None:
        return set()
    return {str(issue_id) for issue_id in await list_upvoted_issue_ids(db, user.id)}


@router.post("", response_model=BaseResponse[IssueResponse], status_code=201)
async def report_issue(
    payload: IssueCreate,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
    backend: BackendClient = Depends(get_backend),
) -> BaseResponse[IssueResponse]:
    """Report a water issue. Signing in is optional."""
    result = await submit_report(db, backend.change_feed, payload, current_user.id if current_user else None)
    return BaseResponse.success(issue_response(result.unwrap()))


@router.get("", response_model=BaseResponse[list[IssueResponse]])
async def get_issues(
    status: str = Query(ALL_STATUSES, description="Status filter, or 'all'"),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> BaseResponse[list[IssueResponse]]:
    """All issues in triage order: urgent first, then newest."""
    upvoted = await _upvoted_ids(db, current_user)
    issues = [issue_response(issue, upvoted) for issue in await list_issues(db)]
    return BaseResponse.success(sort_for_triage(filter_by_status(issues, status)))


@router.get("/mine", response_model=BaseResponse[list[IssueResponse]])
async def get_my_issues(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BaseResponse[list[IssueResponse]]:
    upvoted = await _upvoted_ids(db, current_user)
    issues = await list_my_reports(db, current_user.id)
    return BaseResponse.success([issue_response(issue, upvoted) for issue in issues])


@router.get("/stats", response_model=BaseResponse[IssueStats])
async def get_issue_stats(db: AsyncSession = Depends(get_async_session)) -> BaseResponse[IssueStats]:
    issues = list(await list_issues(db))
    return BaseResponse.success(
        IssueStats(
            total=len(issues),
            status_counts=status_counts(issues),
            issue_type_counts=issue_type_counts(issues),
            resolution_rate=resolution_rate(issues),
        )
    )


@router.patch("/{issue_id}/status", response_model=BaseResponse[IssueResponse])
async def change_issue_status(
    issue_id: UUID,
    payload: StatusUpdate,
    admin: User = Depends(require_admin),  # noqa
    db: AsyncSession = Depends(get_async_session),
    backend: BackendClient = Depends(get_backend),
) -> BaseResponse[IssueResponse]:
    result = await update_status(db, backend.change_feed, issue_id, payload.status.value)
    return BaseResponse.success(issue_response(result.unwrap()))


@router.post("/{issue_id}/upvote", response_model=BaseResponse[UpvoteResponse])
async def toggle_issue_upvote(
    issue_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    backend: BackendClient = Depends(get_backend),
) -> BaseResponse[UpvoteResponse]:
    """Add the caller's upvote, or remove it when already present."""
    currently_upvoted = await get_upvote(db, issue_id, current_user.id) is not None
    result = await toggle_upvote(db, backend.change_feed, issue_id, current_user.id, currently_upvoted)
    outcome = result.unwrap()
    return BaseResponse.success(
        UpvoteResponse(
            issue_id=str(outcome.issue_id),
            has_upvoted=outcome.has_upvoted,
            upvote_count=outcome.upvote_count,
        )
    )
