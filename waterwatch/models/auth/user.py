# Standard library imports
from datetime import datetime
from typing import TYPE_CHECKING

# Third-party imports
from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from sqlalchemy.sql import func

# Local application imports
from waterwatch.models.base import Base
from waterwatch.models.mixins.uuid_timestamp import UUIDTimeStampMixin

if TYPE_CHECKING:
    # Local application imports
    from waterwatch.models.auth.session import Session


class User(UUIDTimeStampMixin, Base):
    __tablename__ = "user"

    email: Mapped[str] = mapped_column(
        String,
        index=True,
        unique=True,
        nullable=False,
        comment="User's email (acts as username)",
    )
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)

    # Role claim copied into every access token
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, server_default=text("false"), nullable=False)

    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    sessions: Mapped[list["Session"]] = relationship("Session", back_populates="user", cascade="all, delete")

    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Last login timestamp",
    )

    @validates("email")
    def normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    def __str__(self) -> str:
        return f"User: {self.email} (admin={self.is_admin})"
