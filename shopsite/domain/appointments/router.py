"""Appointment router - public booking and dashboard endpoints"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...config import BOOKING_RATE_LIMIT, BOOKING_RATE_WINDOW_SECONDS
from ...database import get_db
from ...models import Profile
from ...policies import require_dashboard_access
from ...rate_limiter import create_rate_limiter
from ...services.notification_service import notify_new_booking
from .schemas import (
    AppointmentResponse,
    BookingRequest,
    BookingResponse,
    SlotsResponse,
    StatusUpdate,
)
from .service import AppointmentService, build_booking_notification, format_slot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

booking_rate_limit = create_rate_limiter(
    limit=BOOKING_RATE_LIMIT, window_seconds=BOOKING_RATE_WINDOW_SECONDS, key_prefix="booking"
)


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# PUBLIC BOOKING
# ============================================================================


@router.get("/slots", response_model=SlotsResponse)
async def get_slots(
    day: date = Query(..., alias="date"),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Slot availability for one day (advisory; booking re-checks atomically)"""
    return service.slot_availability(day)


@router.post("/book", response_model=BookingResponse, status_code=201)
async def book_appointment(
    data: BookingRequest,
    background_tasks: BackgroundTasks,
    service: AppointmentService = Depends(get_appointment_service),
    _: None = Depends(booking_rate_limit),
):
    """
    Reserve a slot. Returns 409 with the current taken slots if someone else got it first.
    Email and SMS notifications go out after the response.
    """
    appointment = service.reserve_slot(data)
    background_tasks.add_task(notify_new_booking, build_booking_notification(appointment))
    return BookingResponse(
        id=appointment.id,
        bookingId=appointment.booking_id,
        status=appointment.status,
        appointment_date=appointment.appointment_date,
        appointment_time=format_slot(appointment.appointment_time),
    )


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    status: Optional[str] = Query(None),
    current_user: Profile = Depends(require_dashboard_access),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_appointments(status)


@router.get("/export")
async def export_appointments(
    status: Optional[str] = Query(None),
    current_user: Profile = Depends(require_dashboard_access),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Export appointments as CSV"""
    return service.export_appointments_csv(status)


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: str,
    data: StatusUpdate,
    current_user: Profile = Depends(require_dashboard_access),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.update_status(appointment_id, data.status, current_user.user_id)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    current_user: Profile = Depends(require_dashboard_access),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id)
