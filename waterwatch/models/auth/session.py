# Standard library imports
from datetime import UTC, datetime
from typing import TYPE_CHECKING
import uuid

# Third-party imports
from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from waterwatch.models.base import Base
from waterwatch.models.mixins.uuid_timestamp import UUIDTimeStampMixin

if TYPE_CHECKING:  # pragma: no cover
    # Local application imports
    from waterwatch.models.auth.user import User


class Session(UUIDTimeStampMixin, Base):
    __tablename__ = "session"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    access_token_jti: Mapped[str] = mapped_column(
        String,
        unique=True,
        nullable=False,
        comment="JWT ID for the access token",
    )

    # --- Client info ---------------------------------------------------------
    user_agent: Mapped[str | None] = mapped_column(String, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)

    # --- Session status -----------------------------------------------------
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text("true"), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    invalidated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    invalidation_reason: Mapped[str | None] = mapped_column(String, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    @property
    def is_expired(self) -> bool:
        expires_at = self.expires_at
        # sqlite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return datetime.now(UTC) > expires_at

    @property
    def is_valid(self) -> bool:
        return self.is_active and not self.is_expired and self.invalidated_at is None

    def invalidate(self, reason: str = "sign_out") -> None:
        self.is_active = False
        self.invalidated_at = datetime.now(UTC)
        self.invalidation_reason = reason

    def __str__(self) -> str:
        return f"Session: {self.id} · User: {self.user_id}"
