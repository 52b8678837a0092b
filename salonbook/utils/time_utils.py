from datetime import time
from typing import Union

MINUTES_PER_DAY = 24 * 60

TimeValue = Union[str, time]

def time_str_to_minutes(value: TimeValue) -> int:
    """
    Convert a wall-clock time to minutes since midnight.

    Accepts datetime.time or strings "H:MM", "HH:MM" and "HH:MM:SS"
    (seconds are ignored). "24:00" maps to 1440, the end of the day.
    Raises ValueError on anything else.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    
    if not isinstance(value, str):
        raise ValueError(f"Invalid time value: {value!r}")
    
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format: {value!r}, expected HH:MM")
    
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    if hour == 24 and minute == 0 and second == 0:
        return MINUTES_PER_DAY
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"Time out of range: {value!r}")
    
    return hour * 60 + minute

def minutes_to_time_str(minutes: int) -> str:
    """Format minutes since midnight as zero-padded HH:MM, 1440 as "24:00"."""
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"

def normalize_time_str(value: TimeValue) -> str:
    """Normalize a time of day to the stored HH:MM form."""
    return minutes_to_time_str(time_str_to_minutes(value))
