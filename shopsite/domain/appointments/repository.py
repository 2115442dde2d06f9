"""Appointment repository - Database operations for appointments"""

from datetime import date, time
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def create_appointment(db: Session, **data) -> Appointment:
        """Insert a pending appointment; the slot index rejects a taken slot with IntegrityError"""
        appointment = Appointment(status="pending", **data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def get_taken_times(db: Session, appointment_date: date) -> list[time]:
        rows = (
            db.query(Appointment.appointment_time)
            .filter(
                Appointment.appointment_date == appointment_date,
                Appointment.status != "cancelled",
            )
            .order_by(Appointment.appointment_time.asc())
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def get_appointments(db: Session, status: Optional[str] = None) -> list[Appointment]:
        query = db.query(Appointment)
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(
            Appointment.appointment_date.asc(), Appointment.appointment_time.asc()
        ).all()

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: str) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()
