# Standard library imports
from collections.abc import Sequence
from uuid import UUID

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.core.realtime import ChangeFeed
from waterwatch.db_selectors.notifications import (
    create_notification_in_db,
    delete_notification_in_db,
    get_notification_by_id,
    list_notifications,
)
from waterwatch.models.notifications.emergency_notification import EmergencyNotification, NotificationSeverity
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult
from waterwatch.settings import settings


async def create_notification(
    db: AsyncSession,
    change_feed: ChangeFeed,
    message: str,
    severity: NotificationSeverity = NotificationSeverity.HIGH,
) -> ServiceResult[EmergencyNotification]:
    message = message.strip()
    if not message:
        return ServiceResult.failure(ServiceError.Notifications.EMPTY_MESSAGE)

    severity = NotificationSeverity(severity)
    notification = await create_notification_in_db(db, EmergencyNotification(message=message, severity=severity.value))
    get_contextual_logger(__name__, notification_id=notification.id).info(f"Emergency notification ({severity.value})")
    await change_feed.publish(EmergencyNotification.__tablename__, "INSERT", str(notification.id))
    return ServiceResult.success(notification)


async def get_notifications(db: AsyncSession, limit: int | None = None) -> Sequence[EmergencyNotification]:
    """Newest first."""
    return await list_notifications(db, limit or settings.NOTIFICATIONS_LIMIT)


async def delete_notification(
    db: AsyncSession,
    change_feed: ChangeFeed,
    notification_id: UUID,
) -> ServiceResult[UUID]:
    notification = await get_notification_by_id(db, notification_id)
    if notification is None:
        return ServiceResult.failure(ServiceError.Notifications.NOTIFICATION_NOT_FOUND)

    await delete_notification_in_db(db, notification)
    await change_feed.publish(EmergencyNotification.__tablename__, "DELETE", str(notification_id))
    return ServiceResult.success(notification_id)
