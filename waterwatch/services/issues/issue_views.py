"""
Client-side issue rows and the parse boundary that produces them.

Rows reach the store from the database, from fixtures or from older clients,
so field names and the location encoding drift. ``parse_issue_row`` absorbs
that drift and never lets one bad row fail the list.
"""

# Standard library imports
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.models.issues.water_issue import IssueSeverity, IssueStatus, WaterIssue
from waterwatch.utils.geo.coordinates import Coordinate, coerce_location

logger = get_logger(__name__)


@dataclass(frozen=True)
class WaterIssueView:
    id: str
    location: Coordinate
    issue_type: str
    description: str
    severity: str
    status: str
    created_at: datetime | None
    updated_at: datetime | None
    user_id: str
    upvote_count: int
    has_upvoted: bool = False
    # True when the stored location could not be used and the map center was substituted
    location_degraded: bool = False


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


def coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def _coerce_count(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def parse_issue_row(
    row: Mapping[str, Any],
    fallback_center: Coordinate,
    upvoted_ids: set[str] | frozenset[str] = frozenset(),
) -> WaterIssueView | None:
    """
    Turn an upstream row into a ``WaterIssueView``.

    Any ``has_upvoted`` flag on the row is ignored; the flag is derived from
    ``upvoted_ids``. Returns None only for rows without an id, which cannot be
    addressed by any later operation.
    """
    issue_id = _first(row, "id")
    if issue_id is None:
        logger.warning(f"Skipping issue row without id: {dict(row)!r}")
        return None
    issue_id = str(issue_id)

    location, degraded = coerce_location(row.get("location"), fallback_center)
    if degraded:
        logger.warning(f"Issue {issue_id} has unusable location {row.get('location')!r}, using map center")

    return WaterIssueView(
        id=issue_id,
        location=location,
        issue_type=str(_first(row, "issue_type", "issueType", "type") or "other"),
        description=str(_first(row, "description") or ""),
        severity=str(_first(row, "severity") or IssueSeverity.MEDIUM.value),
        status=str(_first(row, "status") or IssueStatus.PENDING.value),
        created_at=coerce_datetime(_first(row, "created_at", "createdAt")),
        updated_at=coerce_datetime(_first(row, "updated_at", "updatedAt")),
        user_id=str(_first(row, "user_id", "userId") or ""),
        upvote_count=_coerce_count(_first(row, "upvote_count", "upvoteCount")),
        has_upvoted=issue_id in upvoted_ids,
        location_degraded=degraded,
    )


def issue_to_row(issue: WaterIssue) -> dict[str, Any]:
    return {
        "id": str(issue.id),
        "location": issue.location,
        "issue_type": issue.issue_type,
        "description": issue.description,
        "severity": issue.severity,
        "status": issue.status,
        "created_at": issue.created_at,
        "updated_at": issue.updated_at,
        "user_id": str(issue.user_id),
        "upvote_count": issue.upvote_count,
    }
