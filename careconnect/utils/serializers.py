from typing import Optional

from careconnect.models import (
    User,
    VitalProfile,
    GuardianProfile,
    Booking,
    Review,
    Notification,
    SavedGuardian,
    Message,
)
from careconnect.schemas import (
    UserOut,
    VitalProfileOut,
    GuardianProfileOut,
    GuardianSummaryOut,
    GuardianDetailOut,
    GuardianMetricsOut,
    BookingOut,
    CounterpartOut,
    ReviewOut,
    NotificationOut,
    SavedGuardianOut,
    MessageOut,
)


def chat_id_for(vital_id, guardian_id) -> str:
    return f"{vital_id}-{guardian_id}"


def user_out(user: User, has_profile: bool = False) -> UserOut:
    return UserOut(
        id=str(user.id),
        email=user.email,
        role=user.role,
        has_profile=has_profile,
        created_at=user.created_at,
    )


def vital_out(profile: VitalProfile) -> VitalProfileOut:
    return VitalProfileOut(
        id=str(profile.id),
        user_id=str(profile.user_id),
        name=profile.name,
        age=profile.age,
        gender=profile.gender,
        health_needs=profile.health_needs,
        health_tags=profile.health_tags,
        location=profile.location,
        contact_preference=profile.contact_preference,
        profile_photo=profile.profile_photo or None,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


def _guardian_fields(profile: GuardianProfile) -> dict:
    return dict(
        id=str(profile.id),
        user_id=str(profile.user_id),
        name=profile.name,
        age=profile.age,
        gender=profile.gender,
        experience=profile.experience,
        specialization=profile.specialization,
        care_tags=profile.care_tags,
        languages=profile.languages,
        introduction=profile.introduction,
        availability=profile.availability,
        service_radius=profile.service_radius,
        location=profile.location,
        certifications=profile.certifications,
        profile_photo=profile.profile_photo or None,
        is_verified=profile.is_verified,
        pricing=profile.pricing,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


def guardian_out(profile: GuardianProfile) -> GuardianProfileOut:
    return GuardianProfileOut(**_guardian_fields(profile))


def guardian_summary_out(
    profile: GuardianProfile,
    average_rating: Optional[float],
    review_count: int,
) -> GuardianSummaryOut:
    return GuardianSummaryOut(
        **_guardian_fields(profile),
        average_rating=average_rating,
        review_count=review_count,
    )


def guardian_detail_out(
    profile: GuardianProfile,
    average_rating: Optional[float],
    review_count: int,
    metrics: GuardianMetricsOut,
) -> GuardianDetailOut:
    return GuardianDetailOut(
        **_guardian_fields(profile),
        average_rating=average_rating,
        review_count=review_count,
        metrics=metrics,
    )


def vital_counterpart(profile: VitalProfile | None) -> CounterpartOut | None:
    if not profile:
        return None
    return CounterpartOut(id=str(profile.id), name=profile.name, profile_photo=profile.profile_photo or None)


def guardian_counterpart(profile: GuardianProfile | None) -> CounterpartOut | None:
    if not profile:
        return None
    return CounterpartOut(
        id=str(profile.id),
        name=profile.name,
        profile_photo=profile.profile_photo or None,
        specialization=profile.specialization,
    )


def booking_out(
    booking: Booking,
    vital: VitalProfile | None = None,
    guardian: GuardianProfile | None = None,
    has_review: bool | None = None,
) -> BookingOut:
    return BookingOut(
        id=str(booking.id),
        vital_id=str(booking.vital_id),
        guardian_id=str(booking.guardian_id),
        status=booking.status,
        start_date=booking.start_date,
        end_date=booking.end_date,
        notes=booking.notes,
        responded_at=booking.responded_at,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        vital=vital_counterpart(vital),
        guardian=guardian_counterpart(guardian),
        has_review=has_review,
    )


def review_out(
    review: Review,
    vital: VitalProfile | None = None,
    guardian: GuardianProfile | None = None,
) -> ReviewOut:
    return ReviewOut(
        id=str(review.id),
        booking_id=str(review.booking_id),
        vital_id=str(review.vital_id),
        guardian_id=str(review.guardian_id),
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        vital=vital_counterpart(vital),
        guardian=guardian_counterpart(guardian),
    )


def notification_out(notification: Notification) -> NotificationOut:
    return NotificationOut(
        id=str(notification.id),
        type=notification.type,
        message=notification.message,
        related_id=str(notification.related_id) if notification.related_id else None,
        read=notification.read,
        created_at=notification.created_at,
    )


def saved_guardian_out(saved: SavedGuardian) -> SavedGuardianOut:
    return SavedGuardianOut(
        id=str(saved.id),
        vital_id=str(saved.vital_id),
        guardian_id=str(saved.guardian_id),
        created_at=saved.created_at,
    )


def message_out(message: Message, sender_name: str | None = None) -> MessageOut:
    return MessageOut(
        id=str(message.id),
        chat_id=chat_id_for(message.vital_id, message.guardian_id),
        vital_id=str(message.vital_id),
        guardian_id=str(message.guardian_id),
        sender_id=str(message.sender_id),
        sender_role=message.sender_role,
        sender_name=sender_name,
        message=message.message,
        read=message.read,
        created_at=message.created_at,
    )
