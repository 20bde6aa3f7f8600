from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone

from careconnect.constants import Role


class Message(Document):
    """Chat message between a vital and a guardian.

    A conversation is identified by the (vital_id, guardian_id) pair; clients
    address it as "<vital_id>-<guardian_id>".
    """
    vital_id: Indexed(OID)
    guardian_id: Indexed(OID)
    sender_id: Indexed(OID)  # User id
    sender_role: Role
    message: str
    read: bool = False
    created_at: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "messages"
        indexes = [
            [("vital_id", 1), ("guardian_id", 1), ("created_at", -1)],
        ]
