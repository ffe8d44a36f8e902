# Standard library imports
import enum

# Third-party imports
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

# Local application imports
from waterwatch.models.base import Base
from waterwatch.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class NotificationSeverity(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EmergencyNotification(Base, UUIDTimeStampMixin):
    __tablename__ = "emergency_notifications"

    message: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default=NotificationSeverity.HIGH.value)
