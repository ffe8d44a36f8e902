# Standard library imports
from collections.abc import Sequence
from uuid import UUID

# Third-party imports
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.core.realtime import ChangeFeed
from waterwatch.db_selectors.issues import create_issue_in_db, list_issues_for_user
from waterwatch.models.issues.water_issue import ANONYMOUS_USER_ID, IssueStatus, WaterIssue
from waterwatch.schemas.issues.issue_schemas import IssueCreate
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult
from waterwatch.settings import settings
from waterwatch.utils.geo.coordinates import format_location, normalize


async def submit_report(
    db: AsyncSession,
    change_feed: ChangeFeed,
    data: IssueCreate,
    user_id: UUID | None = None,
) -> ServiceResult[WaterIssue]:
    """
    Store a new report. Location and description are checked before anything
    is written; reports without a session are owned by the anonymous sentinel.
    """
    logger = get_contextual_logger(__name__, user_id=user_id)

    location = normalize(data.location)
    if location is None:
        return ServiceResult.failure(ServiceError.Issues.INVALID_LOCATION)

    description = data.description.strip()
    if not description:
        return ServiceResult.failure(ServiceError.Issues.EMPTY_DESCRIPTION)

    issue = WaterIssue(
        location=format_location(location),
        issue_type=data.issue_type.value,
        description=description,
        severity=data.severity.value,
        status=IssueStatus.PENDING.value,
        user_id=user_id or ANONYMOUS_USER_ID,
        upvote_count=0,
    )

    try:
        issue = await create_issue_in_db(db, issue)
    except SQLAlchemyError:
        logger.error("Failed to store report", exc_info=True)
        await db.rollback()
        return ServiceResult.failure(ServiceError.Common.INTERNAL_SERVER_ERROR)

    logger.info(f"Report {issue.id} stored ({issue.issue_type}, {issue.severity})")
    await change_feed.publish(WaterIssue.__tablename__, "INSERT", str(issue.id))
    return ServiceResult.success(issue)


async def list_my_reports(db: AsyncSession, user_id: UUID, limit: int | None = None) -> Sequence[WaterIssue]:
    return await list_issues_for_user(db, user_id, limit or settings.MY_REPORTS_LIMIT)
