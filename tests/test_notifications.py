# Standard library imports
from uuid import uuid4

# Local application imports
from waterwatch.models.notifications.emergency_notification import NotificationSeverity
from waterwatch.services.notifications.notification_services import (
    create_notification,
    delete_notification,
    get_notifications,
)
from waterwatch.services.service_enums import ServiceError


async def test_create_list_and_delete(db, backend):
    feed = backend.change_feed
    first = (await create_notification(db, feed, "Boil water before drinking", NotificationSeverity.HIGH)).unwrap()
    second = (await create_notification(db, feed, "  Supply cut 2-4pm  ", NotificationSeverity.LOW)).unwrap()

    assert second.message == "Supply cut 2-4pm"
    assert second.severity == "low"

    listed = await get_notifications(db)
    assert [item.id for item in listed] == [second.id, first.id]
    assert [item.id for item in await get_notifications(db, limit=1)] == [second.id]

    assert (await delete_notification(db, feed, first.id)).data == first.id
    assert [item.id for item in await get_notifications(db)] == [second.id]

    assert [(event.table, event.event_type) for event in feed.events] == [
        ("emergency_notifications", "INSERT"),
        ("emergency_notifications", "INSERT"),
        ("emergency_notifications", "DELETE"),
    ]


async def test_blank_message_is_rejected(db, backend):
    result = await create_notification(db, backend.change_feed, "   ")
    assert result.error == ServiceError.Notifications.EMPTY_MESSAGE
    assert backend.change_feed.events == []


async def test_delete_missing_notification(db, backend):
    result = await delete_notification(db, backend.change_feed, uuid4())
    assert result.error == ServiceError.Notifications.NOTIFICATION_NOT_FOUND
