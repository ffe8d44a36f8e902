# Standard library imports
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.backend import BackendClient
from waterwatch.core.db import get_async_session
from waterwatch.dependancies.common import get_backend, require_admin
from waterwatch.models.auth.user import User
from waterwatch.schemas.common import BaseResponse
from waterwatch.schemas.notifications.notification_schemas import NotificationCreate, NotificationResponse
from waterwatch.services.notifications.notification_services import (
    create_notification,
    delete_notification,
    get_notifications,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=BaseResponse[list[NotificationResponse]])
async def list_emergency_notifications(
    limit: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
) -> BaseResponse[list[NotificationResponse]]:
    """Most recent emergency notifications first."""
    notifications = await get_notifications(db, limit)
    return BaseResponse.success([NotificationResponse.model_validate(item) for item in notifications])


@router.post("", response_model=BaseResponse[NotificationResponse], status_code=201)
async def broadcast_emergency_notification(
    payload: NotificationCreate,
    admin: User = Depends(require_admin),  # noqa
    db: AsyncSession = Depends(get_async_session),
    backend: BackendClient = Depends(get_backend),
) -> BaseResponse[NotificationResponse]:
    result = await create_notification(db, backend.change_feed, payload.message, payload.severity)
    return BaseResponse.success(NotificationResponse.model_validate(result.unwrap()))


@router.delete("/{notification_id}", response_model=BaseResponse[dict])
async def remove_emergency_notification(
    notification_id: UUID,
    admin: User = Depends(require_admin),  # noqa
    db: AsyncSession = Depends(get_async_session),
    backend: BackendClient = Depends(get_backend),
) -> BaseResponse[dict]:
    deleted_id = (await delete_notification(db, backend.change_feed, notification_id)).unwrap()
    return BaseResponse.success({"id": str(deleted_id), "deleted": True})
