"""
Email Service using Resend
Compiles MJML templates to responsive HTML and sends booking notifications
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import ADMIN_EMAIL, BUSINESS_NAME, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    admin_booking_notification_template,
    customer_booking_confirmation_template,
)
from .schemas import BookingNotification
from .shared.validators import is_deliverable_email

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    pass


class EmailDeliveryError(Exception):
    pass


def compile_mjml_to_html(mjml_content: str) -> str:
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"❌ MJML did not compile: {e}")
        raise EmailDeliveryError(f"Could not render email: {e}") from e

    # Result is a dict-like object carrying "html" and "errors"
    errors = result.get("errors") if isinstance(result, dict) else getattr(result, "errors", None)
    if errors:
        logger.warning(f"⚠️ MJML reported: {errors}")
    html = result.get("html") if isinstance(result, dict) else getattr(result, "html", None)
    return html or ""


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """Render `mjml_content` and deliver it through Resend; returns the Resend response"""
    if not RESEND_API_KEY:
        logger.error("❌ RESEND_API_KEY is not set, cannot send email")
        raise EmailNotConfiguredError("Email service not configured")

    recipients = [to] if isinstance(to, str) else list(to)
    params = {
        "from": from_address or EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": compile_mjml_to_html(mjml_content),
    }

    try:
        response = resend.Emails.send(params)
    except Exception as e:
        logger.error(f"❌ Resend rejected '{subject}' for {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {e}") from e

    logger.info(f"📧 '{subject}' sent to {recipients}")
    return response


async def send_booking_emails(notification: BookingNotification) -> dict:
    """
    Email the business owner about a new booking and, when the address looks
    deliverable, send the customer a confirmation.

    Returns:
        {"success": True, "adminEmail": <response>, "customerEmail": <response or None>}
    """
    if not ADMIN_EMAIL:
        logger.error("❌ ADMIN_EMAIL not configured")
        raise EmailNotConfiguredError("Admin email not configured")

    booking_id = notification.bookingId or "N/A"

    admin_response = await send_email(
        to=ADMIN_EMAIL,
        subject=f"New Appointment Booking #{booking_id} - {notification.customerName}",
        mjml_content=admin_booking_notification_template(
            booking_id=booking_id,
            customer_name=notification.customerName,
            customer_email=notification.customerEmail,
            customer_phone=notification.customerPhone,
            appointment_date=notification.appointmentDate,
            appointment_time=notification.appointmentTime,
            service_type=notification.serviceType,
            notes=notification.notes,
        ),
    )

    customer_response = None
    if is_deliverable_email(notification.customerEmail):
        customer_response = await send_email(
            to=notification.customerEmail,
            subject=f"Appointment Confirmation #{booking_id} - {BUSINESS_NAME}",
            mjml_content=customer_booking_confirmation_template(
                booking_id=booking_id,
                customer_name=notification.customerName,
                appointment_date=notification.appointmentDate,
                appointment_time=notification.appointmentTime,
                service_type=notification.serviceType,
            ),
        )
    else:
        logger.info(f"⚠️ Skipping customer confirmation - address not deliverable: {notification.customerEmail}")

    return {"success": True, "adminEmail": admin_response, "customerEmail": customer_response}
