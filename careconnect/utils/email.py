"""
Transactional e-mail: HTML templates plus a best-effort sender.

EMAIL_PROVIDER=dummy only logs the message (dev / tests);
EMAIL_PROVIDER=smtp sends through the configured SMTP server.
"""
import asyncio
import smtplib
from email.message import EmailMessage
from html import escape

from careconnect.config import get_settings
from careconnect.utils.logger import get_logger

settings = get_settings()
logger = get_logger("email")

FOOTER = (
    '<p style="margin-top: 30px; color: #718096; font-size: 14px;">'
    "Care with compassion, anytime, anywhere.</p>"
)


def _wrap(title: str, body: str, color: str = "#14b8a6") -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f'<h2 style="color: {color};">{title}</h2>{body}{FOOTER}</div>'
    )


def vital_profile_created(name: str) -> dict:
    return {
        "subject": "Your CareConnect Profile is Ready",
        "html": _wrap(
            f"Welcome to CareConnect, {escape(name)}!",
            "<p>Your Vital profile has been successfully created. You can now:</p>"
            "<ul><li>Browse available Guardians</li><li>Book care services</li>"
            "<li>Connect with compassionate caregivers</li></ul>",
        ),
    }


def guardian_profile_activated(name: str) -> dict:
    return {
        "subject": "Guardian Profile Activated",
        "html": _wrap(
            f"Welcome to CareConnect, {escape(name)}!",
            "<p>Your Guardian profile has been successfully activated. You can now:</p>"
            "<ul><li>Receive booking requests from Vitals</li><li>Manage your care services</li></ul>",
        ),
    }


def booking_requested(vital_name: str) -> dict:
    return {
        "subject": "New Booking Request",
        "html": _wrap(
            "New Booking Request",
            f"<p>{escape(vital_name)} has requested your care services.</p>"
            "<p>Please log in to your dashboard to accept or reject the request.</p>",
        ),
    }


def booking_accepted(vital_name: str, guardian_name: str) -> dict:
    return {
        "subject": "Booking Accepted",
        "html": _wrap(
            f"Great News, {escape(vital_name)}!",
            f"<p>Your booking request has been accepted by <strong>{escape(guardian_name)}</strong>.</p>"
            "<p>You can now connect with your Guardian through the platform.</p>",
            color="#22c55e",
        ),
    }


def booking_rejected(vital_name: str, guardian_name: str) -> dict:
    return {
        "subject": "Booking Update",
        "html": _wrap(
            "Booking Update",
            f"<p>Hi {escape(vital_name)}, unfortunately your booking request with "
            f"<strong>{escape(guardian_name)}</strong> could not be accepted at this time.</p>"
            "<p>There are many other Guardians available. Please browse the platform to find another match.</p>",
            color="#2d3748",
        ),
    }


def booking_completed(guardian_name: str) -> dict:
    return {
        "subject": "Service Completed",
        "html": _wrap(
            "Service Completed",
            f"<p>Your service with <strong>{escape(guardian_name)}</strong> has been marked as completed.</p>"
            "<p>Please leave a review to help others find quality care.</p>",
            color="#22c55e",
        ),
    }


def _send_smtp(to: str, subject: str, html: str) -> None:
    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM or settings.SMTP_USER
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content("This message requires an HTML capable mail client.")
    msg.add_alternative(html, subtype="html")

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
        smtp.starttls()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
        smtp.send_message(msg)


async def send_email(*, to: str, subject: str, html: str) -> bool:
    """Send an e-mail; never raises. Returns True when handed to the provider."""
    if not to:
        return False
    if settings.EMAIL_PROVIDER != "smtp" or not settings.SMTP_HOST:
        logger.info(f"[EMAIL:SKIP] to={to} subject={subject}")
        return False
    try:
        await asyncio.to_thread(_send_smtp, to, subject, html)
        logger.info(f"E-mail sent to {to}: {subject}")
        return True
    except Exception as e:
        logger.error(f"Email sending error ({to}): {e}", exc_info=True)
        return False
