"""
Trust metrics shown on a guardian's public card and dashboard.
"""
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, List, Optional

from careconnect.constants import BookingStatus, WEEKDAYS
from careconnect.models import Booking, GuardianProfile, Review, Availability
from careconnect.schemas import (
    AvailabilityStatusOut,
    GuardianMetricsOut,
    RatingStatsOut,
    VerificationBadgesOut,
)
from careconnect.services.rating_service import summarize_ratings, completion_reliability
from careconnect.utils.time_utils import to_utc, utcnow

RESPONSE_SAMPLE_SIZE = 20
MAX_RESPONSE_WINDOW = timedelta(days=7)

RESPONDED = (BookingStatus.ACCEPTED.value, BookingStatus.REJECTED.value)
COMMITTED = (
    BookingStatus.ACCEPTED.value,
    BookingStatus.ONGOING.value,
    BookingStatus.COMPLETED.value,
)


def response_speed_minutes(bookings: Iterable[Booking]) -> Optional[int]:
    """Mean minutes between a request and the guardian's answer.

    Only the 20 most recent answered bookings count, and answers slower than
    a week are treated as noise.
    """
    answered = [b for b in bookings if b.status in RESPONDED]
    answered.sort(key=lambda b: to_utc(b.created_at), reverse=True)

    deltas = []
    for booking in answered[:RESPONSE_SAMPLE_SIZE]:
        answered_at = booking.responded_at or booking.updated_at
        delta = to_utc(answered_at) - to_utc(booking.created_at)
        if timedelta(0) < delta < MAX_RESPONSE_WINDOW:
            deltas.append(delta.total_seconds())

    if not deltas:
        return None
    return round(sum(deltas) / len(deltas) / 60)


def format_response_speed(minutes: Optional[int]) -> str:
    if not minutes:
        return "Response time not available"
    if minutes < 15:
        return "Usually responds within 15 minutes"
    if minutes < 60:
        return f"Responds within {minutes} minutes"
    if minutes < 1440:
        hours = round(minutes / 60)
        return f"Responds within {hours} hour{'s' if hours > 1 else ''}"
    days = round(minutes / 1440)
    return f"Responds within {days} day{'s' if days > 1 else ''}"


def repeat_bookings(bookings: Iterable[Booking]) -> int:
    """Number of distinct vitals who booked more than once."""
    counts = Counter(str(b.vital_id) for b in bookings)
    return sum(1 for n in counts.values() if n > 1)


def availability_status(availability: Availability, today: Optional[date] = None) -> AvailabilityStatusOut:
    today = today or utcnow().date()
    tomorrow = today + timedelta(days=1)
    days = set(availability.days or [])
    shift = availability.shift_type
    return AvailabilityStatusOut(
        today="Available" if WEEKDAYS[today.weekday()] in days else "Not Available",
        tomorrow="Available" if WEEKDAYS[tomorrow.weekday()] in days else "Not Available",
        shift_type=shift.value if shift else None,
    )


def reliability_score(bookings: Iterable[Booking]) -> int:
    """Percentage of committed bookings that reached COMPLETED."""
    committed = [b for b in bookings if b.status in COMMITTED]
    if not committed:
        return 0
    completed = sum(1 for b in committed if b.status == BookingStatus.COMPLETED.value)
    return round(completed / len(committed) * 100)


def format_reliability_score(score: int) -> str:
    if score >= 95:
        return f"{score}% bookings completed"
    if score >= 80:
        return f"{score}% completion rate"
    return "Low cancellation rate"


def verification_badges(
    profile: GuardianProfile,
    stats: RatingStatsOut,
    repeat: int,
) -> VerificationBadgesOut:
    return VerificationBadgesOut(
        id_verified=profile.is_verified,
        certification_uploaded=bool(profile.certifications),
        highly_rated=stats.average_rating >= 4.5 and stats.total_reviews >= 3,
        repeat_bookings=repeat > 0,
    )


def compute_guardian_metrics(
    profile: GuardianProfile,
    bookings: List[Booking],
    reviews: List[Review],
    today: Optional[date] = None,
) -> GuardianMetricsOut:
    stats = summarize_ratings(reviews)
    minutes = response_speed_minutes(bookings)
    repeat = repeat_bookings(bookings)
    score = reliability_score(bookings)
    return GuardianMetricsOut(
        rating=stats,
        response_minutes=minutes,
        response_label=format_response_speed(minutes),
        repeat_bookings=repeat,
        reliability_score=score,
        reliability_label=format_reliability_score(score),
        completion_reliability=completion_reliability(bookings),
        availability=availability_status(profile.availability, today),
        badges=verification_badges(profile, stats, repeat),
    )


async def build_guardian_metrics(profile: GuardianProfile) -> GuardianMetricsOut:
    bookings = await Booking.find(Booking.guardian_id == profile.id).to_list()
    reviews = await Review.find(Review.guardian_id == profile.id).to_list()
    return compute_guardian_metrics(profile, bookings, reviews)
