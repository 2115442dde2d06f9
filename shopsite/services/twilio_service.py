"""
Twilio SMS Service
Sends booking alerts to the business owner's phone
"""

import logging
from typing import Optional

import httpx

from ..config import (
    ADMIN_PHONE_NUMBER,
    BUSINESS_NAME,
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_PHONE_NUMBER,
)
from ..schemas import BookingNotification

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class SMSNotConfiguredError(Exception):
    pass


class SMSDeliveryError(Exception):
    pass


def build_booking_sms(notification: BookingNotification) -> str:
    lines = [
        "New Appointment!",
        "",
        f"Customer: {notification.customerName}",
        f"Date: {notification.appointmentDate}",
        f"Time: {notification.appointmentTime}",
    ]
    if notification.serviceType:
        lines.append(f"Service: {notification.serviceType}")
    if notification.customerPhone:
        lines.append(f"Phone: {notification.customerPhone}")
    lines.extend(["", f"- {BUSINESS_NAME}"])
    return "\n".join(lines)


async def send_sms(to_phone: str, message_body: str, from_phone: Optional[str] = None) -> str:
    """
    Send one SMS via the Twilio REST API.

    Returns:
        The Twilio message SID

    Raises:
        SMSNotConfiguredError: credentials or sender number missing
        SMSDeliveryError: Twilio rejected the message or was unreachable
    """
    sender = from_phone or TWILIO_PHONE_NUMBER
    if not TWILIO_ACCOUNT_SID or not TWILIO_AUTH_TOKEN or not sender:
        logger.error("❌ Twilio credentials not configured")
        raise SMSNotConfiguredError("Twilio credentials not configured")

    logger.info(f"🚀 Sending SMS to Twilio API for {to_phone}")
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json",
                auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
                data={"To": to_phone, "From": sender, "Body": message_body},
                timeout=10.0,
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Twilio API unreachable: {str(e)}")
        raise SMSDeliveryError(str(e)) from e

    logger.info(f"📡 Twilio API response status: {response.status_code}")

    if response.status_code in [200, 201]:
        message_sid = response.json().get("sid")
        logger.info(f"✅ SMS sent successfully to {to_phone} (SID: {message_sid})")
        return message_sid

    try:
        error_data = response.json()
    except ValueError:
        error_data = {}
    error_message = error_data.get("message", "Unknown error")
    error_code = error_data.get("code")
    logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
    raise SMSDeliveryError(f"[{error_code}] {error_message}" if error_code else error_message)


async def send_booking_sms(notification: BookingNotification) -> dict:
    """Text the business owner about a new booking"""
    if not ADMIN_PHONE_NUMBER:
        logger.error("❌ ADMIN_PHONE_NUMBER not configured")
        raise SMSNotConfiguredError("Admin phone number not configured")

    message_sid = await send_sms(ADMIN_PHONE_NUMBER, build_booking_sms(notification))
    return {"success": True, "messageSid": message_sid}
