from datetime import datetime, timedelta, timezone

from beanie import PydanticObjectId as OID

from careconnect.constants import BookingStatus
from careconnect.models import Booking, Review
from careconnect.services.rating_service import (
    summarize_ratings,
    completion_reliability,
    calculate_completion_reliability,
    calculate_guardian_rating,
    rating_overview,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _review(rating: int, days_ago: int, guardian_id: OID | None = None) -> Review:
    return Review.model_construct(
        booking_id=OID(),
        vital_id=OID(),
        guardian_id=guardian_id or OID(),
        rating=rating,
        created_at=NOW - timedelta(days=days_ago),
    )


def _booking(status: BookingStatus) -> Booking:
    return Booking.model_construct(vital_id=OID(), guardian_id=OID(), status=status.value)


def test_summarize_ratings_empty():
    stats = summarize_ratings([], now=NOW)
    assert stats.average_rating == 0
    assert stats.total_reviews == 0
    assert stats.recent_rating == 0
    assert stats.rating_distribution == {5: 0, 4: 0, 3: 0, 2: 0, 1: 0}


def test_recent_reviews_weigh_double():
    stats = summarize_ratings([_review(5, 1), _review(3, 60)], now=NOW)
    assert stats.average_rating == 4.0
    # (5*2 + 3*1) / 3
    assert stats.recent_rating == 4.3
    assert stats.total_reviews == 2
    assert stats.rating_distribution == {5: 1, 4: 0, 3: 1, 2: 0, 1: 0}


def test_naive_timestamps_are_treated_as_utc():
    review = _review(4, 0)
    review.created_at = review.created_at.replace(tzinfo=None) - timedelta(days=40)
    stats = summarize_ratings([review, _review(2, 2)], now=NOW)
    # (4*1 + 2*2) / 3
    assert stats.recent_rating == 2.7


def test_completion_reliability_penalizes_rejections():
    bookings = [
        _booking(BookingStatus.COMPLETED),
        _booking(BookingStatus.COMPLETED),
        _booking(BookingStatus.REJECTED),
        _booking(BookingStatus.PENDING),
    ]
    assert completion_reliability(bookings) == 37.5


def test_completion_reliability_is_clamped():
    assert completion_reliability([]) == 0
    assert completion_reliability([_booking(BookingStatus.REJECTED)] * 2) == 0
    assert completion_reliability([_booking(BookingStatus.COMPLETED)]) == 100


async def test_rating_queries_per_guardian(db):
    gid, other = OID(), OID()
    for rating, days_ago, guardian_id in ((5, 1, gid), (4, 2, gid), (1, 3, other)):
        await Review(
            booking_id=OID(),
            vital_id=OID(),
            guardian_id=guardian_id,
            rating=rating,
            created_at=NOW - timedelta(days=days_ago),
        ).insert()

    stats = await calculate_guardian_rating(gid)
    assert stats.total_reviews == 2
    assert stats.average_rating == 4.5

    lonely = OID()
    overview = await rating_overview([gid, other, lonely])
    assert overview[gid] == (4.5, 2)
    assert overview[other] == (1.0, 1)
    assert overview[lonely] == (None, 0)


async def test_completion_reliability_reads_guardian_bookings(db):
    gid = OID()
    statuses = (BookingStatus.COMPLETED, BookingStatus.COMPLETED, BookingStatus.REJECTED, BookingStatus.ACCEPTED)
    for status in statuses:
        await Booking(vital_id=OID(), guardian_id=gid, status=status.value).insert()
    await Booking(vital_id=OID(), guardian_id=OID(), status=BookingStatus.REJECTED.value).insert()

    assert await calculate_completion_reliability(gid) == 37.5
    assert await calculate_completion_reliability(OID()) == 0
