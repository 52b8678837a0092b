from typing import Dict, Any, Iterable, Optional
from datetime import date, datetime
from pymongo.errors import DuplicateKeyError
import logging

from salonbook.core.errors import SlotConflictError, InvalidTransitionError
from salonbook.db import appointments as appointments_db
from salonbook.db import availability as availability_db
from salonbook.schemas.appointment import (
    AppointmentCreate, AppointmentStatus, ALLOWED_TRANSITIONS
)
from salonbook.services.availability_service import day_of_week
from salonbook.utils.time_utils import time_str_to_minutes, minutes_to_time_str, MINUTES_PER_DAY

logger = logging.getLogger(__name__)

async def create_appointment(
    appointment_in: AppointmentCreate,
    user_id: str,
    service_duration: int,
    offered_service_ids: Iterable[str]
) -> Dict[str, Any]:
    """
    Book an appointment after re-checking availability at write time.

    The span must lie inside the stylist's active weekly window and must not
    intersect any pending or confirmed appointment of the stylist that day.
    Concurrent bookings with the same start are rejected by the unique
    active-start index.

    Raises:
        ValueError: the request itself is malformed (past date, empty span,
            a service the stylist does not offer)
        SlotConflictError: the span is not bookable
    """
    if appointment_in.appointmentDate < date.today():
        raise ValueError("Cannot book an appointment in the past")
    if appointment_in.serviceId not in set(offered_service_ids):
        raise ValueError("Stylist does not offer this service")
    
    start = time_str_to_minutes(appointment_in.startTime)
    if appointment_in.endTime is not None:
        end = time_str_to_minutes(appointment_in.endTime)
    else:
        end = start + service_duration
    
    if end <= start:
        raise ValueError("endTime must be after startTime")
    if end > MINUTES_PER_DAY:
        raise SlotConflictError("Appointment must end on the day it starts")
    
    start_time = minutes_to_time_str(start)
    end_time = minutes_to_time_str(end)
    
    # Check the stylist's working window for that weekday
    rule = await availability_db.get_availability_rule(
        appointment_in.stylistId, day_of_week(appointment_in.appointmentDate)
    )
    if rule is None or not rule.isAvailable:
        raise SlotConflictError("Stylist is not available on this day")
    if start < time_str_to_minutes(rule.startTime) or end > time_str_to_minutes(rule.endTime):
        raise SlotConflictError(
            f"Requested time {start_time}-{end_time} is outside working hours {rule.startTime}-{rule.endTime}"
        )
    
    # Check for overlapping bookings
    overlapping = await appointments_db.find_overlapping_appointments(
        appointment_in.stylistId, appointment_in.appointmentDate, start_time, end_time
    )
    if overlapping:
        raise SlotConflictError(f"Requested time {start_time}-{end_time} is already booked")
    
    appointment_data = {
        "salonId": appointment_in.salonId,
        "serviceId": appointment_in.serviceId,
        "stylistId": appointment_in.stylistId,
        "userId": user_id,
        "appointmentDate": appointment_in.appointmentDate.isoformat(),
        "startTime": start_time,
        "endTime": end_time,
        "status": AppointmentStatus.PENDING.value,
        "notes": appointment_in.notes,
        "createdAt": datetime.utcnow(),
    }
    
    try:
        appointment = await appointments_db.insert_appointment(appointment_data)
    except DuplicateKeyError:
        logger.info(
            f"Concurrent booking rejected for stylist {appointment_in.stylistId} "
            f"on {appointment_in.appointmentDate} at {start_time}"
        )
        raise SlotConflictError(f"Requested time {start_time}-{end_time} is already booked")
    
    logger.info(f"Appointment {appointment['id']} booked for stylist {appointment_in.stylistId}")
    return appointment

async def change_appointment_status(
    appointment: Dict[str, Any],
    new_status: AppointmentStatus,
    reason: Optional[str] = None
) -> Dict[str, Any]:
    """
    Move an appointment to a new status.

    Allowed: pending -> confirmed | cancelled, confirmed -> completed | cancelled.
    Leaving pending/confirmed releases the stylist's time.
    """
    current_status = AppointmentStatus(appointment["status"])
    
    if new_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransitionError(
            f"Cannot change appointment from {current_status.value} to {new_status.value}"
        )
    
    extra = {}
    if new_status == AppointmentStatus.CANCELLED and reason:
        extra["cancellationReason"] = reason
    
    updated = await appointments_db.update_appointment_status(
        appointment["id"], current_status, new_status, extra
    )
    if updated is None:
        # Status changed between read and write
        raise InvalidTransitionError("Appointment was modified by another request, reload and retry")
    
    return updated
