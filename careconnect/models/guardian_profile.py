from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import List, Optional

from careconnect.constants import Gender, ShiftType, WEEKDAYS
from careconnect.models.common import HHMM_PATTERN, Location


class WorkingHours(BaseModel):
    start: str  # HH:MM
    end: str    # HH:MM

    @field_validator('start', 'end')
    @classmethod
    def validate_time_format(cls, v: str) -> str:
        if not HHMM_PATTERN.match(v):
            raise ValueError('Time must be in HH:MM format')
        return v


class Availability(BaseModel):
    days: List[str] = Field(default_factory=list)
    hours: WorkingHours
    shift_type: Optional[ShiftType] = None

    @field_validator('days')
    @classmethod
    def validate_days(cls, v: List[str]) -> List[str]:
        unknown = [d for d in v if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
        return v


class Pricing(BaseModel):
    hourly: Optional[float] = Field(None, ge=0)
    daily: Optional[float] = Field(None, ge=0)
    monthly: Optional[float] = Field(None, ge=0)
    price_breakdown: Optional[str] = Field(None, max_length=500)


class GuardianProfile(Document):
    """Caregiver profile (one per GUARDIAN user)."""
    user_id: Indexed(OID, unique=True)
    name: str
    age: int = Field(..., ge=18, le=100)
    gender: Gender
    experience: int = Field(..., ge=0)  # years
    specialization: List[str]
    care_tags: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    introduction: Optional[str] = Field(None, max_length=300)
    availability: Availability
    service_radius: float = Field(..., ge=1)  # km
    location: Optional[Location] = None
    phone_number: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)  # uploaded file URLs
    profile_photo: str = ""
    is_verified: bool = False
    pricing: Optional[Pricing] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator('specialization')
    @classmethod
    def validate_specialization(cls, v: List[str]) -> List[str]:
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError('At least one specialization is required')
        return cleaned

    class Settings:
        name = "guardian_profiles"
        indexes = [
            "specialization",
            "location.city",
            "is_verified",
        ]
