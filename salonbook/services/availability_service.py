"""
Appointment availability calculation.

Free slots of a stylist on a date are the fixed-length steps of the
stylist's weekly window for that weekday that do not intersect any
pending or confirmed appointment.

Weekdays are numbered 0 = Sunday through 6 = Saturday everywhere in the
service (datetime.date.weekday() uses 0 = Monday, so it is never used
directly).

Slots are only emitted when they fit completely inside the window: a
09:00-10:15 window yields 09:00, 09:30 and 10:00, and the trailing 15
minutes are dropped.
"""

import asyncio
from datetime import date, datetime
from typing import Awaitable, Callable, Iterable, Iterator, List, Optional
import logging

from salonbook.core.config import settings
from salonbook.core.errors import StoreUnavailableError
from salonbook.db import availability as availability_db
from salonbook.db import appointments as appointments_db
from salonbook.schemas.appointment import ACTIVE_STATUSES
from salonbook.schemas.availability import AvailabilityRule, BookedInterval, TimeSlot
from salonbook.utils.time_utils import time_str_to_minutes, minutes_to_time_str

logger = logging.getLogger(__name__)

RuleFetcher = Callable[[str, int], Awaitable[Optional[AvailabilityRule]]]
BookedFetcher = Callable[..., Awaitable[List[BookedInterval]]]


def day_of_week(target_date: date) -> int:
    """Weekday of a date with 0 = Sunday ... 6 = Saturday."""
    return target_date.isoweekday() % 7


def intervals_overlap(slot_start: int, slot_end: int, booked_start: int, booked_end: int) -> bool:
    """
    True when the half-open spans [slot_start, slot_end) and
    [booked_start, booked_end) share at least one minute.
    """
    return slot_start < booked_end and slot_end > booked_start


def _booked_minutes(booked: Iterable[BookedInterval]) -> List[tuple]:
    spans = []
    for interval in booked:
        start = time_str_to_minutes(interval.startTime)
        end = time_str_to_minutes(interval.endTime)
        if end <= start:
            # Zero or negative length, occupies no time
            logger.warning(f"Ignoring degenerate booked interval {interval.startTime}-{interval.endTime}")
            continue
        spans.append((start, end))
    return spans


def iter_time_slots(
    rule: AvailabilityRule,
    booked: Iterable[BookedInterval],
    slot_minutes: int = 30,
    include_unavailable: bool = False,
) -> Iterator[TimeSlot]:
    """
    Yield the slots of a rule's window in ascending order.

    Booked slots are skipped, or yielded with available=False when
    include_unavailable is set. Inactive rules and rules whose start is not
    before their end yield nothing.
    """
    if slot_minutes <= 0:
        raise ValueError(f"slot_minutes must be positive, got {slot_minutes}")

    if not rule.isAvailable:
        return

    window_start = time_str_to_minutes(rule.startTime)
    window_end = time_str_to_minutes(rule.endTime)
    if window_start >= window_end:
        logger.warning(
            f"Invalid availability rule for stylist {rule.stylistId} on day {rule.dayOfWeek}: "
            f"{rule.startTime} is not before {rule.endTime}"
        )
        return

    booked_spans = _booked_minutes(booked)

    cursor = window_start
    while cursor + slot_minutes <= window_end:
        slot_end = cursor + slot_minutes
        is_booked = any(
            intervals_overlap(cursor, slot_end, booked_start, booked_end)
            for booked_start, booked_end in booked_spans
        )

        if not is_booked:
            yield TimeSlot(time=minutes_to_time_str(cursor), available=True)
        elif include_unavailable:
            yield TimeSlot(time=minutes_to_time_str(cursor), available=False)

        cursor = slot_end


def _as_calendar_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


async def get_available_time_slots(
    stylist_id: str,
    target_date: date,
    include_unavailable: bool = False,
    fetch_rule: Optional[RuleFetcher] = None,
    fetch_booked: Optional[BookedFetcher] = None,
) -> List[TimeSlot]:
    """
    Get the bookable slots of a stylist on a calendar date.

    Args:
        stylist_id: ID of the stylist
        target_date: the calendar date; the time part of a datetime is ignored
        include_unavailable: also return booked slots marked available=False
        fetch_rule / fetch_booked: store readers, default to the MongoDB ones

    Returns:
        Slots ordered by start time. An empty list means the stylist has no
        bookable time that day.

    Raises:
        StoreUnavailableError: either store read failed or timed out. No
            partial availability is ever returned.
    """
    if not isinstance(stylist_id, str) or not stylist_id.strip():
        raise ValueError("stylist_id must be a non-empty string")
    target_date = _as_calendar_date(target_date)

    fetch_rule = fetch_rule or availability_db.get_availability_rule
    fetch_booked = fetch_booked or appointments_db.get_booked_intervals
    weekday = day_of_week(target_date)

    try:
        rule, booked = await asyncio.wait_for(
            asyncio.gather(
                fetch_rule(stylist_id, weekday),
                fetch_booked(stylist_id, target_date, ACTIVE_STATUSES),
            ),
            timeout=settings.STORE_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"Timed out reading availability for stylist {stylist_id} on {target_date}")
        raise StoreUnavailableError("get_available_time_slots", e) from e

    if rule is None or not rule.isAvailable:
        return []

    return list(iter_time_slots(
        rule,
        booked,
        slot_minutes=settings.SLOT_DURATION_MINUTES,
        include_unavailable=include_unavailable,
    ))
