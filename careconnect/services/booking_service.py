"""
Booking workflow. TRANSITIONS is the single authority on which action may
move a booking from which status.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from beanie import PydanticObjectId as OID
from beanie.operators import In
from fastapi import HTTPException

from careconnect.constants import BookingAction, BookingStatus, NotificationType
from careconnect.models import Booking, GuardianProfile, Review, User, VitalProfile
from careconnect.schemas import BookingOut
from careconnect.services.notification_service import notify_user
from careconnect.utils import email
from careconnect.utils.ids import to_oid
from careconnect.utils.logger import get_logger
from careconnect.utils.serializers import booking_out

logger = get_logger("booking_service")


class Transition(NamedTuple):
    allowed_from: Tuple[BookingStatus, ...]
    to: BookingStatus
    notification: NotificationType
    message: str  # formatted with guardian=<name>
    email: Optional[Callable[[str, str], dict]]  # (vital_name, guardian_name) -> template
    error: str


TRANSITIONS: Dict[BookingAction, Transition] = {
    BookingAction.ACCEPT: Transition(
        (BookingStatus.PENDING,),
        BookingStatus.ACCEPTED,
        NotificationType.BOOKING_ACCEPTED,
        "{guardian} has accepted your booking request",
        email.booking_accepted,
        "Can only accept pending bookings",
    ),
    BookingAction.REJECT: Transition(
        (BookingStatus.PENDING,),
        BookingStatus.REJECTED,
        NotificationType.BOOKING_REJECTED,
        "{guardian} has rejected your booking request",
        email.booking_rejected,
        "Can only reject pending bookings",
    ),
    BookingAction.START: Transition(
        (BookingStatus.ACCEPTED,),
        BookingStatus.ONGOING,
        NotificationType.BOOKING_STARTED,
        "{guardian} has started your service",
        None,
        "Can only start accepted bookings",
    ),
    BookingAction.COMPLETE: Transition(
        (BookingStatus.ACCEPTED, BookingStatus.ONGOING),
        BookingStatus.COMPLETED,
        NotificationType.BOOKING_COMPLETED,
        "{guardian} has marked your service as completed. You can now leave a review.",
        lambda vital_name, guardian_name: email.booking_completed(guardian_name),
        "Can only complete ongoing or accepted bookings",
    ),
}

RESPONSE_ACTIONS = (BookingAction.ACCEPT, BookingAction.REJECT)


def next_status(current: str, action: BookingAction) -> BookingStatus:
    """Target status for an action, or 400 if the booking can't make that move."""
    transition = TRANSITIONS[action]
    if BookingStatus(current) not in transition.allowed_from:
        raise HTTPException(status_code=400, detail=transition.error)
    return transition.to


def parse_action(raw: str) -> BookingAction:
    try:
        return BookingAction((raw or "").strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid action")


async def _email_of(user_id: OID) -> Optional[str]:
    user = await User.get(user_id)
    return user.email if user else None


async def create_booking(
    vital: VitalProfile,
    guardian_id: str,
    notes: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Booking:
    gid = to_oid(guardian_id, "guardian ID")
    guardian = await GuardianProfile.get(gid)
    if not guardian:
        raise HTTPException(status_code=404, detail="Guardian not found")

    existing = await Booking.find_one(
        Booking.vital_id == vital.id,
        Booking.guardian_id == gid,
        Booking.status == BookingStatus.PENDING.value,
    )
    if existing:
        raise HTTPException(status_code=400, detail="Booking request already exists")

    booking = Booking(
        vital_id=vital.id,
        guardian_id=gid,
        notes=notes,
        start_date=start_date,
        end_date=end_date,
    )
    await booking.insert()
    logger.info(f"📅 Booking {booking.id} requested: vital {vital.id} -> guardian {gid}")

    await notify_user(
        user_id=guardian.user_id,
        type=NotificationType.BOOKING_REQUEST,
        message=f"{vital.name} has requested your care services",
        related_id=booking.id,
    )
    guardian_email = await _email_of(guardian.user_id)
    if guardian_email:
        await email.send_email(to=guardian_email, **email.booking_requested(vital.name))
    return booking


async def apply_action(guardian: GuardianProfile, booking_id: str, raw_action: str) -> Booking:
    """Move one of the guardian's bookings through the workflow and tell the vital."""
    action = parse_action(raw_action)
    bid = to_oid(booking_id, "booking ID")
    booking = await Booking.get(bid)
    if not booking or booking.guardian_id != guardian.id:
        raise HTTPException(status_code=404, detail="Booking not found")

    transition = TRANSITIONS[action]
    previous = booking.status
    booking.status = next_status(booking.status, action).value
    now = datetime.now(timezone.utc)
    if action in RESPONSE_ACTIONS:
        booking.responded_at = now
    booking.updated_at = now
    await booking.save()
    logger.info(f"Booking {booking.id}: {previous} -> {booking.status} by guardian {guardian.id}")

    vital = await VitalProfile.get(booking.vital_id)
    if vital:
        await notify_user(
            user_id=vital.user_id,
            type=transition.notification,
            message=transition.message.format(guardian=guardian.name),
            related_id=booking.id,
        )
        if transition.email:
            vital_email = await _email_of(vital.user_id)
            if vital_email:
                await email.send_email(to=vital_email, **transition.email(vital.name, guardian.name))
    return booking


async def list_vital_bookings(vital: VitalProfile) -> List[BookingOut]:
    """The vital's bookings, newest first, with guardian cards and review flags."""
    bookings = await Booking.find(Booking.vital_id == vital.id).sort(-Booking.created_at).to_list()
    if not bookings:
        return []
    guardians = await GuardianProfile.find(In(GuardianProfile.id, list({b.guardian_id for b in bookings}))).to_list()
    by_id = {g.id: g for g in guardians}
    reviewed = await Review.find(In(Review.booking_id, [b.id for b in bookings])).to_list()
    reviewed_ids = {r.booking_id for r in reviewed}
    return [
        booking_out(b, guardian=by_id.get(b.guardian_id), has_review=b.id in reviewed_ids)
        for b in bookings
    ]


async def list_guardian_bookings(guardian: GuardianProfile) -> List[BookingOut]:
    bookings = await Booking.find(Booking.guardian_id == guardian.id).sort(-Booking.created_at).to_list()
    if not bookings:
        return []
    vitals = await VitalProfile.find(In(VitalProfile.id, list({b.vital_id for b in bookings}))).to_list()
    by_id = {v.id: v for v in vitals}
    return [booking_out(b, vital=by_id.get(b.vital_id)) for b in bookings]


async def get_booking_for_party(user: User, booking_id: str) -> BookingOut:
    """A single booking, visible only to its vital or its guardian."""
    booking = await Booking.get(to_oid(booking_id, "booking ID"))
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    vital = await VitalProfile.get(booking.vital_id)
    guardian = await GuardianProfile.get(booking.guardian_id)
    is_vital = vital is not None and vital.user_id == user.id
    is_guardian = guardian is not None and guardian.user_id == user.id
    if not (is_vital or is_guardian):
        raise HTTPException(status_code=403, detail="Forbidden")

    has_review = await Review.find_one(Review.booking_id == booking.id) is not None
    return booking_out(booking, vital=vital, guardian=guardian, has_review=has_review)


async def has_active_booking(vital_id: OID, guardian_id: OID) -> bool:
    """True when the pair has an ACCEPTED or ONGOING booking (contact sharing)."""
    booking = await Booking.find_one(
        Booking.vital_id == vital_id,
        Booking.guardian_id == guardian_id,
        In(Booking.status, [BookingStatus.ACCEPTED.value, BookingStatus.ONGOING.value]),
    )
    return booking is not None


async def vital_booked_guardian(vital_id: OID, guardian_id: OID) -> bool:
    return await Booking.find_one(
        Booking.vital_id == vital_id,
        Booking.guardian_id == guardian_id,
    ) is not None
