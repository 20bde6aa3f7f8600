"""
Booking reminders, run hourly by the scheduler started in main.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from careconnect.config import get_settings
from careconnect.constants import BookingStatus, NotificationType
from careconnect.models import Booking, GuardianProfile, VitalProfile
from careconnect.services.notification_service import notify_user
from careconnect.utils.logger import get_logger

settings = get_settings()
logger = get_logger("booking_reminder")


async def send_booking_reminders(now: Optional[datetime] = None) -> int:
    """Remind both parties of ACCEPTED bookings starting within the lead window.

    Each booking is reminded once (reminder_sent). Returns how many bookings
    were reminded.
    """
    now = now or datetime.now(timezone.utc)
    horizon = now + timedelta(hours=settings.REMINDER_LEAD_HOURS)

    upcoming = await Booking.find(
        Booking.status == BookingStatus.ACCEPTED.value,
        Booking.reminder_sent == False,  # noqa: E712
        Booking.start_date >= now,
        Booking.start_date <= horizon,
    ).to_list()

    sent = 0
    for booking in upcoming:
        try:
            vital = await VitalProfile.get(booking.vital_id)
            guardian = await GuardianProfile.get(booking.guardian_id)
            when = booking.start_date.strftime("%Y-%m-%d %H:%M")
            if vital:
                await notify_user(
                    user_id=vital.user_id,
                    type=NotificationType.BOOKING_REMINDER,
                    message=f"Reminder: your care service with {guardian.name if guardian else 'your Guardian'} starts at {when} UTC",
                    related_id=booking.id,
                )
            if guardian:
                await notify_user(
                    user_id=guardian.user_id,
                    type=NotificationType.BOOKING_REMINDER,
                    message=f"Reminder: your care service for {vital.name if vital else 'your Vital'} starts at {when} UTC",
                    related_id=booking.id,
                )
            booking.reminder_sent = True
            await booking.save()
            sent += 1
        except Exception as e:
            logger.error(f"❌ Error sending reminder for booking {booking.id}: {e}", exc_info=True)
            continue

    if sent:
        logger.info(f"✅ Sent {sent} booking reminder(s)")
    return sent


def build_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        send_booking_reminders,
        trigger="cron",
        minute=0,  # top of every hour
        id="booking_reminders",
        replace_existing=True,
    )
    return scheduler
