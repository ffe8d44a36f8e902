# Standard library imports
from collections.abc import Sequence
from uuid import UUID

# Third-party imports
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.models.issues.upvote import IssueUpvote
from waterwatch.models.issues.water_issue import WaterIssue


async def list_issues(db: AsyncSession) -> Sequence[WaterIssue]:
    result = await db.execute(select(WaterIssue).order_by(WaterIssue.created_at.desc()))
    return result.scalars().all()


async def list_issues_for_user(db: AsyncSession, user_id: UUID, limit: int | None = None) -> Sequence[WaterIssue]:
    query = select(WaterIssue).where(WaterIssue.user_id == user_id).order_by(WaterIssue.created_at.desc())
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def get_issue_by_id(db: AsyncSession, issue_id: UUID) -> WaterIssue | None:
    result = await db.execute(select(WaterIssue).where(WaterIssue.id == issue_id))
    return result.scalar_one_or_none()


async def create_issue_in_db(db: AsyncSession, issue: WaterIssue) -> WaterIssue:
    db.add(issue)
    await db.commit()
    await db.refresh(issue)
    return issue


async def update_issue_status_in_db(db: AsyncSession, issue: WaterIssue, status: str) -> WaterIssue:
    issue.status = status
    await db.commit()
    await db.refresh(issue)
    return issue


async def set_upvote_count_from_relation(db: AsyncSession, issue_id: UUID) -> None:
    """Recompute the cached counter from the relation in a single UPDATE."""
    cardinality = select(func.count(IssueUpvote.id)).where(IssueUpvote.issue_id == issue_id).scalar_subquery()
    await db.execute(
        update(WaterIssue)
        .where(WaterIssue.id == issue_id)
        .values(upvote_count=cardinality)
        .execution_options(synchronize_session=False)
    )
