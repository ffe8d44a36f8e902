# Standard library imports
from uuid import UUID

# Third-party imports
from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.models.issues.upvote import IssueUpvote


async def get_upvote(db: AsyncSession, issue_id: UUID, user_id: UUID) -> IssueUpvote | None:
    result = await db.execute(
        select(IssueUpvote).where(and_(IssueUpvote.issue_id == issue_id, IssueUpvote.user_id == user_id))
    )
    return result.scalar_one_or_none()


async def list_upvoted_issue_ids(db: AsyncSession, user_id: UUID) -> set[UUID]:
    result = await db.execute(select(IssueUpvote.issue_id).where(IssueUpvote.user_id == user_id))
    return set(result.scalars().all())


async def count_upvotes(db: AsyncSession, issue_id: UUID) -> int:
    result = await db.execute(select(func.count(IssueUpvote.id)).where(IssueUpvote.issue_id == issue_id))
    return result.scalar_one()


async def delete_upvote(db: AsyncSession, issue_id: UUID, user_id: UUID) -> int:
    result = await db.execute(
        delete(IssueUpvote).where(and_(IssueUpvote.issue_id == issue_id, IssueUpvote.user_id == user_id))
    )
    return result.rowcount or 0
