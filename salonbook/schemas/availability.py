from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
import datetime
from enum import Enum

from salonbook.utils.time_utils import normalize_time_str, time_str_to_minutes

DAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

class AvailabilityRule(BaseModel):
    """Weekly open/close window of a stylist, as stored.

    dayOfWeek uses 0 = Sunday through 6 = Saturday. No ordering check is
    applied here so stored rules with startTime >= endTime can still be read
    and reported.
    """
    stylistId: str
    dayOfWeek: int = Field(..., ge=0, le=6)
    startTime: str
    endTime: str
    isAvailable: bool = True

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time_str(value)

class AvailabilityRuleUpdate(BaseModel):
    """Working window for one weekday. endTime "24:00" keeps the window open
    until midnight."""
    startTime: str  # e.g. "09:00"
    endTime: str  # e.g. "17:30"
    isAvailable: bool = True

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time_str(value)

    @model_validator(mode="after")
    def _check_window(self):
        if self.isAvailable and time_str_to_minutes(self.startTime) >= time_str_to_minutes(self.endTime):
            raise ValueError("startTime must be before endTime")
        return self

class AvailabilityRuleResponse(BaseModel):
    id: str
    stylistId: str
    dayOfWeek: int
    dayName: str
    startTime: str
    endTime: str
    isAvailable: bool

class BookedInterval(BaseModel):
    startTime: str
    endTime: str

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time_str(value)

class TimeSlot(BaseModel):
    time: str  # slot start, HH:MM
    available: bool = True

class SlotsStatus(str, Enum):
    AVAILABLE = "available"
    EMPTY = "empty"

class TimeSlotsResponse(BaseModel):
    stylistId: str
    date: datetime.date
    dayOfWeek: int
    status: SlotsStatus
    slots: List[TimeSlot] = []
