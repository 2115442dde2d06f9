"""
Slot reservation tests: atomic booking, availability, and the public booking endpoints.
"""

import threading
from datetime import time

import pytest
from fastapi import HTTPException

from shopsite.database import SessionLocal
from shopsite.domain.appointments.schemas import BookingRequest
from shopsite.domain.appointments.service import TIME_SLOTS, AppointmentService
from shopsite.domain.settings.repository import SettingsRepository
from shopsite.models import Appointment

from .conftest import auth_headers, next_bookable_date, next_sunday


def booking_payload(day, slot="10:00", **overrides):
    payload = {
        "appointment_date": day.isoformat(),
        "appointment_time": slot,
        "user_name": "Asha Verma",
        "user_email": "asha@example.com",
        "user_phone": "+91 98765 00000",
        "service_type": "Data Recovery",
        "notes": "Laptop will not boot",
    }
    payload.update(overrides)
    return payload


class TestTimeSlots:
    def test_sixteen_half_hour_slots_with_lunch_break(self):
        """09:00-12:30 and 14:00-17:30 in half-hour steps"""
        assert len(TIME_SLOTS) == 16
        assert TIME_SLOTS[0] == time(9, 0)
        assert TIME_SLOTS[7] == time(12, 30)
        assert TIME_SLOTS[8] == time(14, 0)
        assert TIME_SLOTS[-1] == time(17, 30)
        assert time(13, 0) not in TIME_SLOTS


class TestReserveSlot:
    def test_concurrent_requests_for_one_slot_yield_exactly_one_booking(self):
        """Many simultaneous reservations of the same slot: one wins, the rest get 409"""
        day = next_bookable_date()
        attempts = 5
        barrier = threading.Barrier(attempts)
        outcomes = []
        lock = threading.Lock()

        def reserve(index):
            db = SessionLocal()
            try:
                request = BookingRequest(
                    appointment_date=day,
                    appointment_time=time(11, 0),
                    user_name=f"Customer {index}",
                    user_email=f"customer{index}@example.com",
                )
                barrier.wait()
                try:
                    AppointmentService(db).reserve_slot(request)
                    result = 201
                except HTTPException as e:
                    result = e.status_code
                with lock:
                    outcomes.append(result)
            finally:
                db.close()

        threads = [threading.Thread(target=reserve, args=(i,)) for i in range(attempts)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert sorted(outcomes) == [201] + [409] * (attempts - 1)

        db = SessionLocal()
        try:
            live = db.query(Appointment).filter(Appointment.appointment_date == day).all()
            assert len(live) == 1
            assert live[0].status == "pending"
        finally:
            db.close()

    def test_conflict_reports_current_taken_slots(self, db):
        day = next_bookable_date()
        service = AppointmentService(db)
        request = BookingRequest(
            appointment_date=day,
            appointment_time=time(9, 30),
            user_name="First",
            user_email="first@example.com",
        )
        service.reserve_slot(request)

        with pytest.raises(HTTPException) as exc_info:
            service.reserve_slot(request)

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail["message"] == "Slot unavailable"
        assert exc_info.value.detail["taken_slots"] == ["09:30"]

    def test_cancelled_booking_frees_the_slot(self, db, staff):
        day = next_bookable_date()
        service = AppointmentService(db)
        request = BookingRequest(
            appointment_date=day,
            appointment_time=time(15, 0),
            user_name="First",
            user_email="first@example.com",
        )
        first = service.reserve_slot(request)
        service.update_status(first.id, "cancelled", staff.user_id)

        second = service.reserve_slot(request)

        assert second.id != first.id
        assert second.status == "pending"
        assert service.taken_slots(day) == ["15:00"]

    def test_same_time_on_another_day_is_independent(self, db):
        service = AppointmentService(db)
        for day in (next_bookable_date(), next_bookable_date(skip=1)):
            service.reserve_slot(
                BookingRequest(
                    appointment_date=day,
                    appointment_time=time(10, 0),
                    user_name="Same Slot",
                    user_email="slot@example.com",
                )
            )
        assert db.query(Appointment).count() == 2

    def test_off_grid_time_rejected(self, db):
        with pytest.raises(HTTPException) as exc_info:
            AppointmentService(db).reserve_slot(
                BookingRequest(
                    appointment_date=next_bookable_date(),
                    appointment_time=time(10, 15),
                    user_name="Odd",
                    user_email="odd@example.com",
                )
            )
        assert exc_info.value.status_code == 422


class TestBookingEndpoints:
    def test_book_returns_booking_reference_and_notifies(self, client, notify_mock):
        day = next_bookable_date()
        response = client.post("/appointments/book", json=booking_payload(day))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["appointment_time"] == "10:00"
        assert data["bookingId"] == data["id"].split("-")[0].upper()

        notify_mock.assert_awaited_once()
        notification = notify_mock.await_args.args[0]
        assert notification.customerName == "Asha Verma"
        assert notification.appointmentTime == "10:00"
        assert notification.bookingId == data["bookingId"]

    def test_second_booking_for_slot_gets_409(self, client, notify_mock):
        day = next_bookable_date()
        assert client.post("/appointments/book", json=booking_payload(day)).status_code == 201

        response = client.post(
            "/appointments/book", json=booking_payload(day, user_name="Late", user_email="late@example.com")
        )

        assert response.status_code == 409
        assert response.json()["detail"]["taken_slots"] == ["10:00"]
        assert notify_mock.await_count == 1

    def test_notification_failure_does_not_undo_booking(self, client, notify_mock, db):
        notify_mock.side_effect = RuntimeError("mail provider down")
        day = next_bookable_date()

        try:
            client.post("/appointments/book", json=booking_payload(day))
        except RuntimeError:
            # TestClient re-raises background task errors
            pass

        assert db.query(Appointment).filter(Appointment.appointment_date == day).count() == 1

    def test_sunday_not_bookable(self, client):
        response = client.post("/appointments/book", json=booking_payload(next_sunday()))
        assert response.status_code == 422

    def test_missing_name_rejected(self, client):
        response = client.post("/appointments/book", json=booking_payload(next_bookable_date(), user_name="  "))
        assert response.status_code == 422

    def test_invalid_phone_rejected(self, client):
        response = client.post("/appointments/book", json=booking_payload(next_bookable_date(), user_phone="12"))
        assert response.status_code == 422

    def test_maintenance_mode_blocks_booking(self, client, db):
        SettingsRepository.upsert(db, "maintenance_mode", "true")

        response = client.post("/appointments/book", json=booking_payload(next_bookable_date()))

        assert response.status_code == 503
        assert db.query(Appointment).count() == 0

    def test_slots_show_taken_times(self, client):
        day = next_bookable_date()
        client.post("/appointments/book", json=booking_payload(day, slot="14:30"))

        response = client.get("/appointments/slots", params={"date": day.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["taken"] == ["14:30"]
        assert len(data["slots"]) == 16
        availability = {slot["time"]: slot["available"] for slot in data["slots"]}
        assert availability["14:30"] is False
        assert availability["09:00"] is True


class TestAppointmentDashboard:
    def test_listing_requires_dashboard_access(self, client):
        assert client.get("/appointments").status_code == 401

    def test_status_lifecycle(self, client, staff):
        day = next_bookable_date()
        booking = client.post("/appointments/book", json=booking_payload(day)).json()
        headers = auth_headers(staff.user_id)

        confirmed = client.patch(
            f"/appointments/{booking['id']}/status", json={"status": "confirmed"}, headers=headers
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"

        back = client.patch(f"/appointments/{booking['id']}/status", json={"status": "pending"}, headers=headers)
        assert back.status_code == 400

        cancelled = client.patch(
            f"/appointments/{booking['id']}/status", json={"status": "cancelled"}, headers=headers
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["cancelled_by"] == staff.user_id

    def test_list_orders_by_date_then_time(self, client, staff):
        later = next_bookable_date(skip=1)
        earlier = next_bookable_date()
        client.post("/appointments/book", json=booking_payload(later, slot="09:00"))
        client.post("/appointments/book", json=booking_payload(earlier, slot="16:00"))
        client.post("/appointments/book", json=booking_payload(earlier, slot="09:30"))

        response = client.get("/appointments", headers=auth_headers(staff.user_id))

        assert response.status_code == 200
        order = [(a["appointment_date"], a["appointment_time"]) for a in response.json()]
        assert order == [
            (earlier.isoformat(), "09:30"),
            (earlier.isoformat(), "16:00"),
            (later.isoformat(), "09:00"),
        ]

    def test_csv_export(self, client, staff):
        client.post("/appointments/book", json=booking_payload(next_bookable_date()))

        response = client.get("/appointments/export", headers=auth_headers(staff.user_id))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("Booking ID,Customer Name,Email")
        assert "Asha Verma" in lines[1]
