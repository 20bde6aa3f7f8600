from typing import List

from beanie.operators import In
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

from careconnect.constants import BookingStatus
from careconnect.models import Booking, GuardianProfile, Review, VitalProfile
from careconnect.schemas import ReviewCreate, ReviewOut
from careconnect.utils.ids import to_oid
from careconnect.utils.logger import get_logger
from careconnect.utils.serializers import review_out

logger = get_logger("review_service")

DUPLICATE_REVIEW = "Review already exists for this booking"


async def create_review(vital: VitalProfile, payload: ReviewCreate) -> Review:
    """Review a COMPLETED booking of this vital. One review per booking."""
    booking = await Booking.get(to_oid(payload.booking_id, "booking ID"))
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.vital_id != vital.id:
        raise HTTPException(status_code=403, detail="Forbidden")
    if booking.status != BookingStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail="Only completed bookings can be reviewed")
    if await Review.find_one(Review.booking_id == booking.id):
        raise HTTPException(status_code=400, detail=DUPLICATE_REVIEW)

    comment = payload.comment.strip() if payload.comment else None
    review = Review(
        booking_id=booking.id,
        vital_id=vital.id,
        guardian_id=booking.guardian_id,
        rating=payload.rating,
        comment=comment or None,
    )
    try:
        await review.insert()
    except DuplicateKeyError:
        # lost a race with a concurrent submit
        raise HTTPException(status_code=400, detail=DUPLICATE_REVIEW)
    logger.info(f"⭐ Review {review.id} ({review.rating}) for guardian {review.guardian_id}")
    return review


async def list_vital_reviews(vital: VitalProfile) -> List[ReviewOut]:
    reviews = await Review.find(Review.vital_id == vital.id).sort(-Review.created_at).to_list()
    if not reviews:
        return []
    guardians = await GuardianProfile.find(In(GuardianProfile.id, list({r.guardian_id for r in reviews}))).to_list()
    by_id = {g.id: g for g in guardians}
    return [review_out(r, guardian=by_id.get(r.guardian_id)) for r in reviews]


async def list_guardian_reviews(guardian_id) -> List[ReviewOut]:
    reviews = await Review.find(Review.guardian_id == guardian_id).sort(-Review.created_at).to_list()
    if not reviews:
        return []
    vitals = await VitalProfile.find(In(VitalProfile.id, list({r.vital_id for r in reviews}))).to_list()
    by_id = {v.id: v for v in vitals}
    return [review_out(r, vital=by_id.get(r.vital_id)) for r in reviews]
