from datetime import date, timedelta

import pytest
from pymongo.errors import DuplicateKeyError

from salonbook.core.errors import SlotConflictError, InvalidTransitionError
from salonbook.db import appointments as appointments_db
from salonbook.db import availability as availability_db
from salonbook.schemas.appointment import AppointmentCreate, AppointmentStatus
from salonbook.schemas.availability import AvailabilityRule
from salonbook.services.appointment_service import create_appointment, change_appointment_status

from conftest import next_weekday

STYLIST_ID = "stylist-1"
OFFERED = ["service-1"]


class FakeAppointmentStore:
    """In-memory stand-in for the appointment and availability collections."""

    def __init__(self, rule=None):
        self.rule = rule
        self.appointments = []
        self.duplicate_on_insert = False

    async def get_availability_rule(self, stylist_id, weekday):
        if self.rule and self.rule.stylistId == stylist_id and self.rule.dayOfWeek == weekday:
            return self.rule
        return None

    async def find_overlapping_appointments(self, stylist_id, target_date, start_time, end_time):
        return [
            a for a in self.appointments
            if a["stylistId"] == stylist_id
            and a["appointmentDate"] == target_date.isoformat()
            and a["status"] in ("pending", "confirmed")
            and a["startTime"] < end_time and a["endTime"] > start_time
        ]

    async def insert_appointment(self, data):
        if self.duplicate_on_insert:
            raise DuplicateKeyError("E11000 duplicate key error")
        appointment = dict(data, id=f"appt-{len(self.appointments) + 1}")
        self.appointments.append(appointment)
        return appointment

    async def update_appointment_status(self, appointment_id, expected_status, new_status, extra=None):
        for appointment in self.appointments:
            if appointment["id"] == appointment_id:
                if appointment["status"] != expected_status.value:
                    return None
                appointment.update(extra or {})
                appointment["status"] = new_status.value
                return appointment
        return None


@pytest.fixture
def monday():
    return next_weekday(1)


@pytest.fixture
def fake_store(monkeypatch):
    store = FakeAppointmentStore(
        AvailabilityRule(stylistId=STYLIST_ID, dayOfWeek=1, startTime="09:00", endTime="17:00")
    )
    monkeypatch.setattr(availability_db, "get_availability_rule", store.get_availability_rule)
    monkeypatch.setattr(appointments_db, "find_overlapping_appointments", store.find_overlapping_appointments)
    monkeypatch.setattr(appointments_db, "insert_appointment", store.insert_appointment)
    monkeypatch.setattr(appointments_db, "update_appointment_status", store.update_appointment_status)
    return store


def booking(day, start, end=None):
    return AppointmentCreate(
        salonId="salon-1", serviceId="service-1", stylistId=STYLIST_ID,
        appointmentDate=day, startTime=start, endTime=end
    )


@pytest.mark.asyncio
async def test_books_pending_appointment_using_service_duration(fake_store, monday):
    appointment = await create_appointment(booking(monday, "10:00"), "client-1", service_duration=45, offered_service_ids=OFFERED)

    assert appointment["status"] == "pending"
    assert appointment["startTime"] == "10:00"
    assert appointment["endTime"] == "10:45"
    assert appointment["appointmentDate"] == monday.isoformat()
    assert appointment["userId"] == "client-1"


@pytest.mark.asyncio
async def test_explicit_end_time_wins(fake_store, monday):
    appointment = await create_appointment(booking(monday, "10:00", "11:30"), "client-1", service_duration=30, offered_service_ids=OFFERED)
    assert appointment["endTime"] == "11:30"


@pytest.mark.asyncio
async def test_overlapping_booking_is_rejected(fake_store, monday):
    await create_appointment(booking(monday, "10:00"), "client-1", service_duration=60, offered_service_ids=OFFERED)

    with pytest.raises(SlotConflictError):
        await create_appointment(booking(monday, "10:30"), "client-2", service_duration=30, offered_service_ids=OFFERED)

    assert len(fake_store.appointments) == 1


@pytest.mark.asyncio
async def test_back_to_back_bookings_are_allowed(fake_store, monday):
    await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)
    await create_appointment(booking(monday, "10:30"), "client-2", service_duration=30, offered_service_ids=OFFERED)
    assert len(fake_store.appointments) == 2


@pytest.mark.asyncio
async def test_cancelled_booking_frees_the_time(fake_store, monday):
    first = await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)
    await change_appointment_status(first, AppointmentStatus.CANCELLED, "sick")

    second = await create_appointment(booking(monday, "10:00"), "client-2", service_duration=30, offered_service_ids=OFFERED)
    assert second["status"] == "pending"


@pytest.mark.asyncio
async def test_concurrent_insert_conflict_is_reported(fake_store, monday):
    fake_store.duplicate_on_insert = True
    with pytest.raises(SlotConflictError):
        await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)


@pytest.mark.asyncio
@pytest.mark.parametrize("start,duration", [("08:30", 30), ("16:45", 30), ("16:30", 60)])
async def test_outside_working_hours_is_rejected(fake_store, monday, start, duration):
    with pytest.raises(SlotConflictError):
        await create_appointment(booking(monday, start), "client-1", service_duration=duration, offered_service_ids=OFFERED)


@pytest.mark.asyncio
async def test_day_without_schedule_is_rejected(fake_store):
    with pytest.raises(SlotConflictError):
        await create_appointment(booking(next_weekday(0), "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)


@pytest.mark.asyncio
async def test_past_date_is_rejected(fake_store):
    with pytest.raises(ValueError):
        await create_appointment(booking(date.today() - timedelta(days=1), "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(fake_store, monday):
    with pytest.raises(ValueError):
        await create_appointment(booking(monday, "10:00", "09:30"), "client-1", service_duration=30, offered_service_ids=OFFERED)


@pytest.mark.asyncio
async def test_status_lifecycle(fake_store, monday):
    appointment = await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)

    confirmed = await change_appointment_status(appointment, AppointmentStatus.CONFIRMED)
    assert confirmed["status"] == "confirmed"

    completed = await change_appointment_status(confirmed, AppointmentStatus.COMPLETED)
    assert completed["status"] == "completed"

    with pytest.raises(InvalidTransitionError):
        await change_appointment_status(completed, AppointmentStatus.CANCELLED)


@pytest.mark.asyncio
async def test_pending_cannot_complete(fake_store, monday):
    appointment = await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)
    with pytest.raises(InvalidTransitionError):
        await change_appointment_status(appointment, AppointmentStatus.COMPLETED)


@pytest.mark.asyncio
async def test_stale_status_is_rejected(fake_store, monday):
    appointment = await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)
    stale_copy = dict(appointment)
    await change_appointment_status(appointment, AppointmentStatus.CANCELLED)

    with pytest.raises(InvalidTransitionError):
        await change_appointment_status(stale_copy, AppointmentStatus.CONFIRMED)


@pytest.mark.asyncio
async def test_cancellation_reason_is_kept(fake_store, monday):
    appointment = await create_appointment(booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=OFFERED)
    cancelled = await change_appointment_status(appointment, AppointmentStatus.CANCELLED, "running late")
    assert cancelled["cancellationReason"] == "running late"


@pytest.mark.asyncio
async def test_service_not_offered_by_stylist_is_rejected(fake_store, monday):
    with pytest.raises(ValueError):
        await create_appointment(
            booking(monday, "10:00"), "client-1", service_duration=30, offered_service_ids=["service-2"]
        )
    assert fake_store.appointments == []


@pytest.mark.asyncio
async def test_booking_may_end_at_midnight(fake_store):
    saturday = next_weekday(6)
    fake_store.rule = AvailabilityRule(stylistId=STYLIST_ID, dayOfWeek=6, startTime="20:00", endTime="24:00")

    appointment = await create_appointment(
        booking(saturday, "23:30"), "client-1", service_duration=30, offered_service_ids=OFFERED
    )
    assert appointment["endTime"] == "24:00"

    with pytest.raises(SlotConflictError):
        await create_appointment(
            booking(saturday, "23:45"), "client-2", service_duration=30, offered_service_ids=OFFERED
        )
