"""
Admin triage: status filter, urgent-first ordering, dashboard aggregates and
status updates.
"""

# Standard library imports
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
import math
from typing import Protocol, TypeVar
from uuid import UUID

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.core.realtime import ChangeFeed
from waterwatch.db_selectors.issues import get_issue_by_id, update_issue_status_in_db
from waterwatch.models.issues.water_issue import IssueStatus, WaterIssue
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult

ALL_STATUSES = "all"

_OLDEST = datetime.min.replace(tzinfo=UTC)


class TriageItem(Protocol):
    status: str
    issue_type: str
    created_at: datetime | None


ItemT = TypeVar("ItemT", bound=TriageItem)


def filter_by_status(issues: Iterable[ItemT], status: str | None) -> list[ItemT]:
    if not status or status == ALL_STATUSES:
        return list(issues)
    return [issue for issue in issues if issue.status == status]


def _created_at(issue: TriageItem) -> datetime:
    created_at = issue.created_at
    if created_at is None:
        return _OLDEST
    return created_at if created_at.tzinfo else created_at.replace(tzinfo=UTC)


def sort_for_triage(issues: Iterable[ItemT]) -> list[ItemT]:
    """Urgent issues first, then newest first."""
    newest_first = sorted(issues, key=_created_at, reverse=True)
    # sorted() is stable, so the recency order survives inside each group
    return sorted(newest_first, key=lambda issue: issue.status != IssueStatus.URGENT.value)


def status_counts(issues: Iterable[TriageItem]) -> dict[str, int]:
    counts = Counter(issue.status for issue in issues)
    return {status.value: counts.get(status.value, 0) for status in IssueStatus} | dict(counts)


def issue_type_counts(issues: Iterable[TriageItem]) -> dict[str, int]:
    return dict(Counter(issue.issue_type for issue in issues))


def resolution_rate(issues: Sequence[TriageItem]) -> int:
    """Percentage of resolved issues, rounded half up."""
    if not issues:
        return 0
    resolved = sum(1 for issue in issues if issue.status == IssueStatus.RESOLVED.value)
    return math.floor(resolved / len(issues) * 100 + 0.5)


async def update_status(
    db: AsyncSession,
    change_feed: ChangeFeed,
    issue_id: UUID,
    status: str,
) -> ServiceResult[WaterIssue]:
    """Move an issue to ``status``. Any status may follow any other."""
    logger = get_contextual_logger(__name__, issue_id=issue_id)

    if status not in {member.value for member in IssueStatus}:
        return ServiceResult.failure(ServiceError.Issues.INVALID_STATUS)

    issue = await get_issue_by_id(db, issue_id)
    if issue is None:
        return ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND)

    previous = issue.status
    issue = await update_issue_status_in_db(db, issue, status)
    logger.info(f"Status changed {previous} -> {status}")

    await change_feed.publish(WaterIssue.__tablename__, "UPDATE", str(issue.id))
    return ServiceResult.success(issue)
