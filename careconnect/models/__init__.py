# Re-export Beanie documents
from .user import User
from .vital_profile import VitalProfile
from .guardian_profile import GuardianProfile, Availability, WorkingHours, Pricing
from .common import Location, Coordinates
from .booking import Booking
from .review import Review, ReviewImmutableError
from .notification import Notification
from .saved_guardian import SavedGuardian
from .message import Message
