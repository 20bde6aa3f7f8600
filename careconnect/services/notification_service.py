from typing import List, Optional

from beanie import PydanticObjectId as OID
from beanie.operators import Set
from fastapi import HTTPException

from careconnect.constants import NotificationType
from careconnect.models import Notification
from careconnect.services.realtime import schedule_relay
from careconnect.utils.logger import get_logger
from careconnect.utils.serializers import notification_out

logger = get_logger("notifications")

LIST_LIMIT = 50


async def notify_user(
    *,
    user_id: str | OID,
    type: NotificationType,
    message: str,
    related_id: Optional[OID] = None,
) -> Notification:
    """Store an in-app notification and push it to the user's live sockets."""
    uid = user_id if isinstance(user_id, OID) else OID(user_id)
    notification = Notification(user_id=uid, type=type, message=message, related_id=related_id)
    await notification.insert()
    schedule_relay(str(uid), notification_out(notification).model_dump(mode="json"))
    return notification


async def list_notifications(user_id: OID) -> List[Notification]:
    return await Notification.find(
        Notification.user_id == user_id
    ).sort(-Notification.created_at).limit(LIST_LIMIT).to_list()


async def unread_count(user_id: OID) -> int:
    return await Notification.find(
        Notification.user_id == user_id,
        Notification.read == False,  # noqa: E712
    ).count()


async def mark_read(user_id: OID, notification_id: OID) -> Notification:
    notification = await Notification.get(notification_id)
    if not notification or notification.user_id != user_id:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not notification.read:
        notification.read = True
        await notification.save()
    return notification


async def mark_all_read(user_id: OID) -> None:
    await Notification.find(
        Notification.user_id == user_id,
        Notification.read == False,  # noqa: E712
    ).update(Set({Notification.read: True}))
