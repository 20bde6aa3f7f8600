from typing import List

from fastapi import APIRouter, Depends

from careconnect.models import User
from careconnect.schemas import NotificationOut, UnreadCountOut
from careconnect.security import get_current_user
from careconnect.services import notification_service
from careconnect.utils.ids import to_oid
from careconnect.utils.serializers import notification_out

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
async def list_notifications(current: User = Depends(get_current_user)):
    """The 50 most recent notifications."""
    items = await notification_service.list_notifications(current.id)
    return [notification_out(n) for n in items]


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(current: User = Depends(get_current_user)):
    return UnreadCountOut(unread=await notification_service.unread_count(current.id))


# declared before /{notification_id} so "read-all" isn't taken for an id
@router.patch("/read-all")
async def mark_all_read(current: User = Depends(get_current_user)):
    await notification_service.mark_all_read(current.id)
    return {"ok": True}


@router.patch("/{notification_id}", response_model=NotificationOut)
async def mark_read(notification_id: str, current: User = Depends(get_current_user)):
    notification = await notification_service.mark_read(current.id, to_oid(notification_id, "notification ID"))
    return notification_out(notification)
