from typing import Optional

from pydantic import BaseModel, field_validator


class BookingNotification(BaseModel):
    """Payload shared by the booking email and SMS notifications"""

    customerName: str
    customerEmail: str = ""  # may be blank; only a deliverable address gets a confirmation
    customerPhone: Optional[str] = None
    appointmentDate: str  # human readable, e.g. "Monday, March 3, 2025"
    appointmentTime: str  # "HH:MM"
    serviceType: Optional[str] = None
    notes: Optional[str] = None
    bookingId: Optional[str] = None

    @field_validator("customerName", "appointmentDate", "appointmentTime")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("customerEmail")
    @classmethod
    def strip_email(cls, v):
        return (v or "").strip()
