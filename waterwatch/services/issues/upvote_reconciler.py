# Standard library imports
from dataclasses import dataclass
from uuid import UUID

# Third-party imports
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.core.realtime import ChangeFeed
from waterwatch.db_selectors.issues import get_issue_by_id, set_upvote_count_from_relation
from waterwatch.db_selectors.upvotes import delete_upvote, get_upvote
from waterwatch.models.issues.upvote import IssueUpvote
from waterwatch.models.issues.water_issue import WaterIssue
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult


@dataclass(frozen=True)
class UpvoteOutcome:
    issue_id: UUID
    has_upvoted: bool
    upvote_count: int


async def toggle_upvote(
    db: AsyncSession,
    change_feed: ChangeFeed,
    issue_id: UUID,
    user_id: UUID,
    currently_upvoted: bool,
) -> ServiceResult[UpvoteOutcome]:
    """
    Remove or add the ``(issue, user)`` upvote row, then recompute
    ``upvote_count`` from the relation in the same transaction.

    ``currently_upvoted`` is the caller's view of the relation. A duplicate
    insert (another request won the race) counts as already upvoted.
    """
    logger = get_contextual_logger(__name__, issue_id=issue_id, user_id=user_id)

    issue = await get_issue_by_id(db, issue_id)
    if issue is None:
        return ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND)

    if currently_upvoted:
        removed = await delete_upvote(db, issue_id, user_id)
        logger.info(f"Removed upvote rows: {removed}")
    elif await get_upvote(db, issue_id, user_id) is None:
        db.add(IssueUpvote(issue_id=issue_id, user_id=user_id))
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.info("Upvote already recorded by a concurrent request")

    await set_upvote_count_from_relation(db, issue_id)
    await db.commit()

    await db.refresh(issue)
    has_upvoted = await get_upvote(db, issue_id, user_id) is not None

    await change_feed.publish(WaterIssue.__tablename__, "UPDATE", str(issue_id))
    return ServiceResult.success(
        UpvoteOutcome(issue_id=issue_id, has_upvoted=has_upvoted, upvote_count=issue.upvote_count)
    )
