# Standard library imports
import enum
import uuid

# Third-party imports
from sqlalchemy import CheckConstraint, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from waterwatch.models.base import Base
from waterwatch.models.mixins.uuid_timestamp import UUIDTimeStampMixin

# Owner recorded for reports submitted without a session
ANONYMOUS_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000000")


class IssueType(str, enum.Enum):
    LEAK = "leak"
    FLOOD = "flood"
    CONTAMINATION = "contamination"
    SHORTAGE = "shortage"
    OTHER = "other"


class IssueSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    RESOLVED = "resolved"
    URGENT = "urgent"


class WaterIssue(Base, UUIDTimeStampMixin):
    __tablename__ = "water_issues"
    __table_args__ = (CheckConstraint("upvote_count >= 0", name="ck_water_issues_upvote_count"),)

    # Point string "(lng,lat)", longitude first
    location: Mapped[str] = mapped_column(String(64), nullable=False)

    # Kept as plain strings so one drifted row cannot break loading the whole table
    issue_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default=IssueSeverity.MEDIUM.value)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=IssueStatus.PENDING.value, index=True)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, default=ANONYMOUS_USER_ID, index=True)
    upvote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    upvotes = relationship("IssueUpvote", back_populates="issue", cascade="all, delete-orphan")
