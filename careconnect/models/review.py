from beanie import Document, Indexed, before_event, Replace, Save, SaveChanges
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone
from typing import Optional


class ReviewImmutableError(RuntimeError):
    pass


class Review(Document):
    """Rating left by a Vital for a completed booking. Never edited once stored."""
    booking_id: Indexed(OID, unique=True)  # one review per booking
    vital_id: Indexed(OID)
    guardian_id: Indexed(OID)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    created_at: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))  # set once at insert

    @before_event(Replace, Save, SaveChanges)
    def forbid_changes(self):
        if self.id is not None:
            raise ReviewImmutableError("Reviews cannot be modified")

    class Settings:
        name = "reviews"
