# Standard library imports
from collections.abc import Sequence
from uuid import UUID

# Third-party imports
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.models.notifications.emergency_notification import EmergencyNotification


async def list_notifications(db: AsyncSession, limit: int | None = None) -> Sequence[EmergencyNotification]:
    query = select(EmergencyNotification).order_by(EmergencyNotification.created_at.desc())
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def get_notification_by_id(db: AsyncSession, notification_id: UUID) -> EmergencyNotification | None:
    result = await db.execute(select(EmergencyNotification).where(EmergencyNotification.id == notification_id))
    return result.scalar_one_or_none()


async def create_notification_in_db(db: AsyncSession, notification: EmergencyNotification) -> EmergencyNotification:
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    return notification


async def delete_notification_in_db(db: AsyncSession, notification: EmergencyNotification) -> None:
    await db.delete(notification)
    await db.commit()
