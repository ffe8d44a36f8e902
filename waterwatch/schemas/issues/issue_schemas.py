# Standard library imports
from datetime import datetime

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

# Local application imports
from waterwatch.models.issues.water_issue import IssueSeverity, IssueStatus, IssueType


class IssueCreate(BaseModel):
    issue_type: IssueType
    description: str = Field(..., max_length=5000)
    severity: IssueSeverity = IssueSeverity.MEDIUM
    # Latitude first
    location: tuple[float, float]

    model_config = {
        "json_schema_extra": {
            "example": {
                "issue_type": "leak",
                "description": "pipe burst",
                "severity": "high",
                "location": [28.61, 77.21],
            }
        }
    }


class StatusUpdate(BaseModel):
    status: IssueStatus


class IssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location: tuple[float, float]
    location_degraded: bool = False
    issue_type: str
    description: str
    severity: str
    status: str
    user_id: str
    upvote_count: int
    has_upvoted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class IssueStats(BaseModel):
    total: int
    status_counts: dict[str, int]
    issue_type_counts: dict[str, int]
    resolution_rate: int


class UpvoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    issue_id: str
    has_upvoted: bool
    upvote_count: int
