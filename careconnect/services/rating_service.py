"""
Rating aggregation for guardians.

The pure helpers (summarize_ratings, completion_reliability) work on plain
documents so matching and metrics can reuse them on already-fetched data.
"""
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from beanie import PydanticObjectId as OID
from beanie.operators import In

from careconnect.constants import BookingStatus
from careconnect.models import Review, Booking
from careconnect.schemas import RatingStatsOut
from careconnect.utils.time_utils import to_utc, utcnow

RECENT_WINDOW = timedelta(days=30)
RECENT_WEIGHT = 2
OLDER_WEIGHT = 1


def summarize_ratings(reviews: Iterable[Review], now: Optional[datetime] = None) -> RatingStatsOut:
    """Average, distribution and a recency-weighted rating.

    Reviews from the last 30 days count twice as much in recent_rating.
    """
    reviews = list(reviews)
    if not reviews:
        return RatingStatsOut(
            average_rating=0,
            total_reviews=0,
            rating_distribution={5: 0, 4: 0, 3: 0, 2: 0, 1: 0},
            recent_rating=0,
        )

    now = to_utc(now or utcnow())
    distribution = {5: 0, 4: 0, 3: 0, 2: 0, 1: 0}
    total = 0
    weighted_sum = 0
    weight_count = 0
    for review in reviews:
        distribution[review.rating] = distribution.get(review.rating, 0) + 1
        total += review.rating
        age = now - to_utc(review.created_at)
        weight = RECENT_WEIGHT if age <= RECENT_WINDOW else OLDER_WEIGHT
        weighted_sum += review.rating * weight
        weight_count += weight

    average = total / len(reviews)
    recent = weighted_sum / weight_count if weight_count else average
    return RatingStatsOut(
        average_rating=round(average, 1),
        total_reviews=len(reviews),
        rating_distribution=distribution,
        recent_rating=round(recent, 1),
    )


def completion_reliability(bookings: Iterable[Booking]) -> float:
    """Share of completed bookings, penalizing rejections by half; clamped to 0..100."""
    bookings = list(bookings)
    if not bookings:
        return 0
    completed = sum(1 for b in bookings if b.status == BookingStatus.COMPLETED.value)
    rejected = sum(1 for b in bookings if b.status == BookingStatus.REJECTED.value)
    reliability = ((completed - rejected * 0.5) / len(bookings)) * 100
    return max(0, min(100, reliability))


async def calculate_guardian_rating(guardian_id: OID) -> RatingStatsOut:
    reviews = await Review.find(Review.guardian_id == guardian_id).sort(-Review.created_at).to_list()
    return summarize_ratings(reviews)


async def calculate_completion_reliability(guardian_id: OID) -> float:
    bookings = await Booking.find(Booking.guardian_id == guardian_id).to_list()
    return completion_reliability(bookings)


def _plain_average(ratings: List[int]) -> Optional[float]:
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


async def rating_overview(guardian_ids: List[OID]) -> Dict[OID, Tuple[Optional[float], int]]:
    """(average_rating, review_count) per guardian, with one query for the batch.

    average_rating is None for guardians with no reviews.
    """
    if not guardian_ids:
        return {}
    reviews = await Review.find(In(Review.guardian_id, guardian_ids)).to_list()
    by_guardian: Dict[OID, List[int]] = defaultdict(list)
    for review in reviews:
        by_guardian[review.guardian_id].append(review.rating)
    return {
        gid: (_plain_average(by_guardian.get(gid, [])), len(by_guardian.get(gid, [])))
        for gid in guardian_ids
    }
