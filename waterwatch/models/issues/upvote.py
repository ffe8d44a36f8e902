# Standard library imports
import uuid

# Third-party imports
from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from waterwatch.models.base import Base
from waterwatch.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class IssueUpvote(Base, UUIDTimeStampMixin):
    __tablename__ = "issue_upvotes"
    __table_args__ = (UniqueConstraint("issue_id", "user_id", name="uq_issue_upvotes_issue_user"),)

    issue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("water_issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    issue = relationship("WaterIssue", back_populates="upvotes")
