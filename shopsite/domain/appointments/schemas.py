"""Appointment domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, field_serializer, field_validator

from ...shared.validators import validate_phone


class BookingRequest(BaseModel):
    """Public booking form submission"""

    appointment_date: date
    appointment_time: time
    user_name: str
    user_email: str
    user_phone: Optional[str] = None
    service_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("user_name", "user_email")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("user_phone")
    @classmethod
    def validate_phone_number(cls, v):
        if v:
            return validate_phone(v)
        return None

    @field_validator("notes", "service_type")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class SlotAvailability(BaseModel):
    time: str
    available: bool


class SlotsResponse(BaseModel):
    date: date
    slots: list[SlotAvailability]
    taken: list[str]


class BookingResponse(BaseModel):
    id: str
    bookingId: str
    status: str
    appointment_date: date
    appointment_time: str


class AppointmentResponse(BaseModel):
    id: str
    booking_id: str
    user_name: str
    user_email: str
    user_phone: Optional[str] = None
    service_type: Optional[str] = None
    notes: Optional[str] = None
    appointment_date: date
    appointment_time: time
    status: str
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer("appointment_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class StatusUpdate(BaseModel):
    status: str
