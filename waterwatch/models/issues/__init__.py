# Local application imports
from waterwatch.models.issues.upvote import IssueUpvote
from waterwatch.models.issues.water_issue import (
    ANONYMOUS_USER_ID,
    IssueSeverity,
    IssueStatus,
    IssueType,
    WaterIssue,
)

__all__ = [
    "ANONYMOUS_USER_ID",
    "IssueSeverity",
    "IssueStatus",
    "IssueType",
    "IssueUpvote",
    "WaterIssue",
]
