from datetime import date, datetime, timedelta, timezone

import pytest
from beanie import PydanticObjectId as OID

from careconnect.constants import BookingStatus
from careconnect.models import Availability, Booking, GuardianProfile, WorkingHours
from careconnect.schemas import RatingStatsOut
from careconnect.services import guardian_metrics as gm

NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)


def _booking(status, created_ago: timedelta, responded_ago: timedelta | None = None, vital_id=None) -> Booking:
    return Booking.model_construct(
        vital_id=vital_id or OID(),
        guardian_id=OID(),
        status=status.value,
        created_at=NOW - created_ago,
        updated_at=NOW - (responded_ago or created_ago),
        responded_at=(NOW - responded_ago) if responded_ago is not None else None,
    )


def _guardian(**overrides) -> GuardianProfile:
    data = dict(
        user_id=OID(),
        name="Grace",
        age=35,
        gender="Female",
        experience=8,
        specialization=["Elderly Care"],
        availability=Availability(days=["Monday"], hours=WorkingHours(start="08:00", end="17:00"), shift_type="Morning"),
        service_radius=20,
    )
    data.update(overrides)
    return GuardianProfile.model_construct(**data)


@pytest.mark.parametrize(
    "minutes, label",
    [
        (None, "Response time not available"),
        (0, "Response time not available"),
        (10, "Usually responds within 15 minutes"),
        (45, "Responds within 45 minutes"),
        (60, "Responds within 1 hour"),
        (180, "Responds within 3 hours"),
        (1440, "Responds within 1 day"),
        (2880, "Responds within 2 days"),
    ],
)
def test_format_response_speed(minutes, label):
    assert gm.format_response_speed(minutes) == label


def test_response_speed_uses_answered_bookings_within_a_week():
    bookings = [
        _booking(BookingStatus.ACCEPTED, timedelta(hours=2), timedelta(hours=1)),      # 60 min
        _booking(BookingStatus.REJECTED, timedelta(hours=3), timedelta(hours=2, minutes=30)),  # 30 min
        _booking(BookingStatus.PENDING, timedelta(hours=5)),
        _booking(BookingStatus.ACCEPTED, timedelta(days=10), timedelta(days=1)),       # 9 days, ignored
    ]
    assert gm.response_speed_minutes(bookings) == 45


def test_response_speed_falls_back_to_updated_at():
    booking = _booking(BookingStatus.ACCEPTED, timedelta(hours=1))
    booking.updated_at = NOW - timedelta(minutes=40)
    assert booking.responded_at is None
    assert gm.response_speed_minutes([booking]) == 20


def test_response_speed_without_answers():
    assert gm.response_speed_minutes([]) is None
    assert gm.response_speed_minutes([_booking(BookingStatus.PENDING, timedelta(hours=1))]) is None


def test_repeat_bookings_counts_distinct_vitals():
    a, b = OID(), OID()
    bookings = [
        _booking(BookingStatus.COMPLETED, timedelta(days=3), vital_id=a),
        _booking(BookingStatus.PENDING, timedelta(days=1), vital_id=a),
        _booking(BookingStatus.COMPLETED, timedelta(days=2), vital_id=b),
    ]
    assert gm.repeat_bookings(bookings) == 1


def test_availability_status():
    availability = Availability(days=["Monday"], hours=WorkingHours(start="08:00", end="17:00"), shift_type="Night")
    status = gm.availability_status(availability, today=date(2024, 1, 1))  # a Monday
    assert status.today == "Available"
    assert status.tomorrow == "Not Available"
    assert status.shift_type == "Night"

    sunday = gm.availability_status(availability, today=date(2024, 1, 7))
    assert sunday.today == "Not Available"
    assert sunday.tomorrow == "Available"


def test_reliability_score_and_label():
    bookings = [
        _booking(BookingStatus.COMPLETED, timedelta(days=1)),
        _booking(BookingStatus.ACCEPTED, timedelta(days=1)),
        _booking(BookingStatus.ONGOING, timedelta(days=1)),
        _booking(BookingStatus.REJECTED, timedelta(days=1)),
        _booking(BookingStatus.PENDING, timedelta(days=1)),
    ]
    assert gm.reliability_score(bookings) == 33
    assert gm.reliability_score([]) == 0
    assert gm.format_reliability_score(100) == "100% bookings completed"
    assert gm.format_reliability_score(85) == "85% completion rate"
    assert gm.format_reliability_score(33) == "Low cancellation rate"


def test_verification_badges():
    guardian = _guardian(is_verified=True, certifications=["https://cdn.example.com/cert.png"])
    strong = RatingStatsOut(average_rating=4.6, total_reviews=3, recent_rating=4.6)
    badges = gm.verification_badges(guardian, strong, repeat=0)
    assert badges.id_verified
    assert badges.certification_uploaded
    assert badges.highly_rated
    assert not badges.repeat_bookings

    # a high average on too few reviews isn't enough
    few = RatingStatsOut(average_rating=5.0, total_reviews=2, recent_rating=5.0)
    badges = gm.verification_badges(_guardian(), few, repeat=2)
    assert not badges.highly_rated
    assert not badges.certification_uploaded
    assert badges.repeat_bookings


def test_compute_guardian_metrics_assembles_everything():
    guardian = _guardian()
    bookings = [_booking(BookingStatus.COMPLETED, timedelta(days=2))]
    metrics = gm.compute_guardian_metrics(guardian, bookings, [], today=date(2024, 1, 1))
    assert metrics.reliability_score == 100
    assert metrics.reliability_label == "100% bookings completed"
    assert metrics.completion_reliability == 100
    assert metrics.response_minutes is None
    assert metrics.response_label == "Response time not available"
    assert metrics.availability.today == "Available"
    assert metrics.rating.total_reviews == 0
