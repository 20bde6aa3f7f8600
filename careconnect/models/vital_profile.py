from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field, field_validator
from datetime import datetime, timezone
from typing import List

from careconnect.constants import Gender, ContactPreference
from careconnect.models.common import Location


class VitalProfile(Document):
    """Care-seeker profile (one per VITAL user)."""
    user_id: Indexed(OID, unique=True)
    name: str
    age: int = Field(..., ge=1, le=120)
    gender: Gender
    health_needs: str
    health_tags: List[str] = Field(default_factory=list)
    location: Location
    contact_preference: ContactPreference
    profile_photo: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator('name', 'health_needs')
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Field is required')
        return v

    class Settings:
        name = "vital_profiles"
        indexes = [
            "location.city",
        ]
