from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone
from typing import Optional

from careconnect.constants import BookingStatus


class Booking(Document):
    """Care-service request from a Vital to a Guardian."""
    vital_id: Indexed(OID)
    guardian_id: Indexed(OID)
    status: Indexed(str) = BookingStatus.PENDING.value
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    responded_at: Optional[datetime] = None  # set on accept / reject
    reminder_sent: bool = False
    created_at: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "bookings"
