"""Appointment service - slot reservation and appointment administration"""

import csv
import logging
from datetime import date, datetime, time, timedelta, timezone
from io import StringIO
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import BOOKING_WINDOW_DAYS, BUSINESS_TIMEZONE
from ...database import is_unique_violation
from ...models import APPOINTMENT_STATUSES, Appointment
from ...schemas import BookingNotification
from ..settings.service import is_maintenance_mode
from .repository import AppointmentRepository
from .schemas import BookingRequest

logger = logging.getLogger(__name__)


def _build_time_slots() -> list[time]:
    slots = []
    for start_hour, end_hour in ((9, 13), (14, 18)):  # morning and afternoon sessions
        for hour in range(start_hour, end_hour):
            slots.extend([time(hour, 0), time(hour, 30)])
    return slots


TIME_SLOTS = _build_time_slots()

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
}


def format_slot(value: time) -> str:
    return value.strftime("%H:%M")


def business_today() -> date:
    return datetime.now(ZoneInfo(BUSINESS_TIMEZONE)).date()


def is_bookable_date(day: date, today: Optional[date] = None) -> bool:
    """Today through BOOKING_WINDOW_DAYS ahead, closed on Sundays"""
    today = today or business_today()
    if day < today or day > today + timedelta(days=BOOKING_WINDOW_DAYS):
        return False
    return day.weekday() != 6


def format_display_date(day: date) -> str:
    """e.g. 'Monday, March 3, 2025'"""
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"


def build_booking_notification(appointment: Appointment) -> BookingNotification:
    return BookingNotification(
        customerName=appointment.user_name,
        customerEmail=appointment.user_email,
        customerPhone=appointment.user_phone,
        appointmentDate=format_display_date(appointment.appointment_date),
        appointmentTime=format_slot(appointment.appointment_time),
        serviceType=appointment.service_type,
        notes=appointment.notes,
        bookingId=appointment.booking_id,
    )


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    # ------------------------------------------------------------------
    # Public booking
    # ------------------------------------------------------------------

    def taken_slots(self, appointment_date: date) -> list[str]:
        """Advisory read; the unique slot index is what actually prevents double booking"""
        return [format_slot(t) for t in self.repo.get_taken_times(self.db, appointment_date)]

    def slot_availability(self, appointment_date: date) -> dict:
        if not is_bookable_date(appointment_date):
            raise HTTPException(status_code=422, detail="Date is not available for booking")
        taken = self.taken_slots(appointment_date)
        return {
            "date": appointment_date,
            "slots": [
                {"time": format_slot(slot), "available": format_slot(slot) not in taken}
                for slot in TIME_SLOTS
            ],
            "taken": taken,
        }

    def reserve_slot(self, data: BookingRequest) -> Appointment:
        """
        Insert a pending appointment for the requested slot.

        Exactly one of any number of concurrent requests for the same live slot succeeds;
        the others get 409 with the refreshed list of taken slots.
        """
        if is_maintenance_mode(self.db):
            raise HTTPException(status_code=503, detail="Booking is temporarily unavailable")

        if not is_bookable_date(data.appointment_date):
            raise HTTPException(status_code=422, detail="Date is not available for booking")

        slot = data.appointment_time.replace(second=0, microsecond=0)
        if slot not in TIME_SLOTS:
            raise HTTPException(status_code=422, detail="Time is not a bookable slot")

        try:
            appointment = self.repo.create_appointment(
                self.db,
                appointment_date=data.appointment_date,
                appointment_time=slot,
                user_name=data.user_name,
                user_email=data.user_email,
                user_phone=data.user_phone,
                service_type=data.service_type,
                notes=data.notes,
            )
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                logger.info(f"⚠️ Slot {data.appointment_date} {format_slot(slot)} already taken")
                raise HTTPException(
                    status_code=409,
                    detail={
                        "message": "Slot unavailable",
                        "taken_slots": self.taken_slots(data.appointment_date),
                    },
                ) from e
            logger.error(f"❌ Booking insert rejected: {e}")
            raise HTTPException(status_code=500, detail="Booking failed") from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Booking failed: {e}")
            raise HTTPException(status_code=500, detail="Booking failed") from e

        logger.info(
            f"✅ Appointment {appointment.booking_id} booked for {appointment.appointment_date} "
            f"{format_slot(appointment.appointment_time)}"
        )
        return appointment

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_appointments(self, status: Optional[str] = None) -> list[Appointment]:
        if status and status not in APPOINTMENT_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status filter")
        return self.repo.get_appointments(self.db, status)

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def update_status(self, appointment_id: str, new_status: str, actor_id: str) -> Appointment:
        appointment = self.get_appointment(appointment_id)

        if new_status not in ALLOWED_TRANSITIONS.get(appointment.status, set()):
            raise HTTPException(
                status_code=400,
                detail=f"Cannot change status from {appointment.status} to {new_status}",
            )

        updates = {"status": new_status}
        if new_status == "cancelled":
            updates["cancelled_by"] = actor_id
            updates["cancelled_at"] = datetime.now(timezone.utc)

        logger.info(f"📋 Appointment {appointment.booking_id}: {appointment.status} -> {new_status}")
        return self.repo.update_appointment(self.db, appointment, **updates)

    def delete_appointment(self, appointment_id: str) -> dict:
        appointment = self.get_appointment(appointment_id)
        self.repo.delete_appointment(self.db, appointment)
        return {"message": "Appointment deleted"}

    def export_appointments_csv(self, status: Optional[str] = None) -> StreamingResponse:
        appointments = self.get_appointments(status)

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "Booking ID",
                "Customer Name",
                "Email",
                "Phone",
                "Date",
                "Time",
                "Service",
                "Status",
                "Notes",
                "Created At",
            ]
        )
        for appointment in appointments:
            writer.writerow(
                [
                    appointment.booking_id,
                    appointment.user_name,
                    appointment.user_email,
                    appointment.user_phone or "",
                    appointment.appointment_date.isoformat(),
                    format_slot(appointment.appointment_time),
                    appointment.service_type or "",
                    appointment.status,
                    appointment.notes or "",
                    (
                        appointment.created_at.strftime("%Y-%m-%d %H:%M:%S")
                        if appointment.created_at
                        else ""
                    ),
                ]
            )

        filename = f"appointments_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        logger.info(f"✅ CSV export successful: {filename} ({len(appointments)} appointments)")

        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )
