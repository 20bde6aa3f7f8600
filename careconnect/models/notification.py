from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone

from careconnect.constants import NotificationType


class Notification(Document):
    """In-app notification shown in the user's bell."""
    user_id: Indexed(OID)
    type: NotificationType
    message: str
    related_id: OID | None = None  # booking or message id
    read: bool = False
    created_at: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "notifications"
        indexes = [
            [("user_id", 1), ("read", 1)],
        ]
