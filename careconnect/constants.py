from enum import Enum


class Role(str, Enum):
    """System roles for RBAC."""
    VITAL = "VITAL"        # care-seeker
    GUARDIAN = "GUARDIAN"  # caregiver


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class BookingAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    START = "start"
    COMPLETE = "complete"


class NotificationType(str, Enum):
    BOOKING_REQUEST = "BOOKING_REQUEST"
    BOOKING_ACCEPTED = "BOOKING_ACCEPTED"
    BOOKING_REJECTED = "BOOKING_REJECTED"
    BOOKING_STARTED = "BOOKING_STARTED"
    BOOKING_COMPLETED = "BOOKING_COMPLETED"
    BOOKING_REMINDER = "BOOKING_REMINDER"
    MESSAGE = "MESSAGE"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    UNDISCLOSED = "Prefer not to say"


class ContactPreference(str, Enum):
    PHONE = "Phone"
    EMAIL = "Email"
    BOTH = "Both"


class ShiftType(str, Enum):
    MORNING = "Morning"
    NIGHT = "Night"
    ALL_DAY = "24x7"


# Python's date.weekday() order (Monday == 0)
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
)
