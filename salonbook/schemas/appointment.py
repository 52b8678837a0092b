from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime
from enum import Enum

from salonbook.utils.time_utils import normalize_time_str

class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

# Appointments in these statuses occupy the stylist's time
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.COMPLETED: set(),
}

class AppointmentCreate(BaseModel):
    salonId: str
    serviceId: str
    stylistId: str
    appointmentDate: date
    startTime: str
    endTime: Optional[str] = None  # defaults to startTime + service duration
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        if value is None:
            return value
        return normalize_time_str(value)

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    reason: Optional[str] = None

class AppointmentResponse(BaseModel):
    id: str
    salonId: str
    serviceId: str
    stylistId: str
    userId: str
    appointmentDate: date
    startTime: str
    endTime: str
    status: AppointmentStatus
    notes: Optional[str] = None
    cancellationReason: Optional[str] = None
    createdAt: datetime
    updatedAt: Optional[datetime] = None
