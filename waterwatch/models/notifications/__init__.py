# Local application imports
from waterwatch.models.notifications.emergency_notification import EmergencyNotification, NotificationSeverity

__all__ = ["EmergencyNotification", "NotificationSeverity"]
