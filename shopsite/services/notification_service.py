"""
Booking notification fan-out
Attempts the email and SMS channels independently after an appointment is stored
"""

import logging

from ..email_service import send_booking_emails
from ..schemas import BookingNotification
from .twilio_service import send_booking_sms

logger = logging.getLogger(__name__)


async def notify_new_booking(notification: BookingNotification) -> dict:
    """
    Best-effort delivery: each channel is tried once, a failure is logged and
    never stops the other channel or affects the stored appointment.

    Returns:
        Dict with email_sent and sms_sent status
    """
    result = {"email_sent": False, "sms_sent": False, "email_error": None, "sms_error": None}
    booking_ref = notification.bookingId or notification.customerName

    try:
        logger.info(f"📧 Sending booking emails for {booking_ref}")
        await send_booking_emails(notification)
        result["email_sent"] = True
        logger.info(f"✅ Booking emails sent for {booking_ref}")
    except Exception as e:
        result["email_error"] = str(e)
        logger.error(f"❌ Failed to send booking emails for {booking_ref}: {e}")

    try:
        logger.info(f"📱 Sending booking SMS for {booking_ref}")
        await send_booking_sms(notification)
        result["sms_sent"] = True
        logger.info(f"✅ Booking SMS sent for {booking_ref}")
    except Exception as e:
        result["sms_error"] = str(e)
        logger.error(f"❌ Failed to send booking SMS for {booking_ref}: {e}")

    return result
