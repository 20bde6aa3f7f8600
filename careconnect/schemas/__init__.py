import re
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Literal

from careconnect.constants import (
    Role,
    Gender,
    ContactPreference,
    NotificationType,
    BookingStatus,
)
from careconnect.models.common import Location
from careconnect.models.guardian_profile import Availability, Pricing

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# -------------------- Auth / User Schemas --------------------


class RegisterIn(BaseModel):
    email: str
    password: str = Field(..., min_length=6)
    role: Role

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class RefreshIn(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    id: str
    email: str
    role: Role
    has_profile: bool = False
    created_at: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthOut(Token):
    user: UserOut


# -------------------- Vital Schemas --------------------


class VitalProfileCreate(BaseModel):
    name: str
    age: int = Field(..., ge=1, le=120)
    gender: Gender
    health_needs: str
    health_tags: List[str] = Field(default_factory=list)
    location: Location
    contact_preference: ContactPreference
    profile_photo: Optional[str] = None


class VitalProfileUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=1, le=120)
    gender: Optional[Gender] = None
    health_needs: Optional[str] = None
    health_tags: Optional[List[str]] = None
    location: Optional[Location] = None
    contact_preference: Optional[ContactPreference] = None
    # Present-but-empty clears the photo; absent keeps it
    profile_photo: Optional[str] = None


class VitalProfileOut(BaseModel):
    id: str
    user_id: str
    name: str
    age: int
    gender: Gender
    health_needs: str
    health_tags: List[str] = []
    location: Location
    contact_preference: ContactPreference
    profile_photo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------------------- Guardian Schemas --------------------


class GuardianProfileCreate(BaseModel):
    name: str
    age: int = Field(..., ge=18, le=100)
    gender: Gender
    experience: int = Field(..., ge=0)
    specialization: List[str] = Field(..., min_length=1)
    care_tags: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    introduction: Optional[str] = Field(None, max_length=300)
    availability: Availability
    service_radius: float = Field(..., ge=1)
    location: Optional[Location] = None
    phone_number: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)
    profile_photo: Optional[str] = None
    pricing: Optional[Pricing] = None


class GuardianProfileUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=18, le=100)
    gender: Optional[Gender] = None
    experience: Optional[int] = Field(None, ge=0)
    specialization: Optional[List[str]] = Field(None, min_length=1)
    care_tags: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    introduction: Optional[str] = Field(None, max_length=300)
    availability: Optional[Availability] = None
    service_radius: Optional[float] = Field(None, ge=1)
    location: Optional[Location] = None
    phone_number: Optional[str] = None
    certifications: Optional[List[str]] = None
    profile_photo: Optional[str] = None
    pricing: Optional[Pricing] = None


class GuardianProfileOut(BaseModel):
    """Public guardian card. phone_number is withheld; see the contact endpoint."""
    id: str
    user_id: str
    name: str
    age: int
    gender: Gender
    experience: int
    specialization: List[str]
    care_tags: List[str] = []
    languages: List[str] = []
    introduction: Optional[str] = None
    availability: Availability
    service_radius: float
    location: Optional[Location] = None
    certifications: List[str] = []
    profile_photo: Optional[str] = None
    is_verified: bool = False
    pricing: Optional[Pricing] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GuardianSummaryOut(GuardianProfileOut):
    average_rating: Optional[float] = None
    review_count: int = 0


class RatingStatsOut(BaseModel):
    average_rating: float = 0
    total_reviews: int = 0
    rating_distribution: Dict[int, int] = Field(default_factory=dict)
    recent_rating: float = 0


class AvailabilityStatusOut(BaseModel):
    today: Literal["Available", "Not Available"]
    tomorrow: Literal["Available", "Not Available"]
    shift_type: Optional[str] = None


class VerificationBadgesOut(BaseModel):
    id_verified: bool = False
    certification_uploaded: bool = False
    highly_rated: bool = False
    repeat_bookings: bool = False


class GuardianMetricsOut(BaseModel):
    rating: RatingStatsOut
    response_minutes: Optional[int] = None
    response_label: str
    repeat_bookings: int = 0
    reliability_score: int = 0
    reliability_label: str
    completion_reliability: float = 0
    availability: AvailabilityStatusOut
    badges: VerificationBadgesOut


class GuardianDetailOut(GuardianSummaryOut):
    metrics: GuardianMetricsOut


class GuardianContactOut(BaseModel):
    email: str
    phone_number: Optional[str] = None


class MatchScoreOut(BaseModel):
    guardian_id: str
    score: float
    explanation: str
    reasons: List[str] = []


class GuardianMatchOut(BaseModel):
    guardian: GuardianSummaryOut
    match_score: MatchScoreOut


# -------------------- Saved Guardians --------------------


class SavedGuardianIn(BaseModel):
    guardian_id: str


class SavedGuardianOut(BaseModel):
    id: str
    vital_id: str
    guardian_id: str
    created_at: Optional[datetime] = None


# -------------------- Bookings --------------------


class BookingCreate(BaseModel):
    guardian_id: str
    notes: Optional[str] = Field(None, max_length=1000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BookingActionIn(BaseModel):
    action: str  # accept | reject | start | complete


class CounterpartOut(BaseModel):
    id: str
    name: Optional[str] = None
    profile_photo: Optional[str] = None
    specialization: Optional[List[str]] = None


class BookingOut(BaseModel):
    id: str
    vital_id: str
    guardian_id: str
    status: BookingStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    vital: Optional[CounterpartOut] = None
    guardian: Optional[CounterpartOut] = None
    has_review: Optional[bool] = None


# -------------------- Reviews --------------------


class ReviewCreate(BaseModel):
    booking_id: str
    rating: int = Field(..., ge=1, le=5, strict=True)
    comment: Optional[str] = Field(None, max_length=500)


class ReviewOut(BaseModel):
    id: str
    booking_id: str
    vital_id: str
    guardian_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    vital: Optional[CounterpartOut] = None
    guardian: Optional[CounterpartOut] = None


# -------------------- Notifications --------------------


class NotificationOut(BaseModel):
    id: str
    type: NotificationType
    message: str
    related_id: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None


class UnreadCountOut(BaseModel):
    unread: int


# -------------------- Chat --------------------


class MessageIn(BaseModel):
    message: str = Field(..., max_length=2000)

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message is required")
        return v


class MessageOut(BaseModel):
    id: str
    chat_id: str
    vital_id: str
    guardian_id: str
    sender_id: str
    sender_role: Role
    sender_name: Optional[str] = None
    message: str
    read: bool = False
    created_at: Optional[datetime] = None


class ConversationOut(BaseModel):
    chat_id: str
    vital_id: str
    guardian_id: str
    counterpart_name: Optional[str] = None
    counterpart_photo: Optional[str] = None
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    unread_count: int = 0


# -------------------- Uploads --------------------


class UploadOut(BaseModel):
    url: str
