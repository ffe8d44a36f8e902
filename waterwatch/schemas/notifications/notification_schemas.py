# Standard library imports
from datetime import datetime
from uuid import UUID

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

# Local application imports
from waterwatch.models.notifications.emergency_notification import NotificationSeverity


class NotificationCreate(BaseModel):
    message: str = Field(..., max_length=1000)
    severity: NotificationSeverity = NotificationSeverity.HIGH


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    message: str
    severity: str
    created_at: datetime
