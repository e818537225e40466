"""Consultation slot arithmetic for doctors' working hours.

Working hours are stored as free text such as ``"09:00-17:00"`` or
``"9:00 AM - 5:00 PM"``. Slots are a fixed 30 minutes regardless of the
doctor's configured consultation duration.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SLOT_MINUTES = 30
# Eight hour day at 30 minute slots.
DEFAULT_TOTAL_SLOTS = 16

_HOURS_PATTERN = re.compile(
    r"(\d{1,2}):?(\d{2})?\s*(AM|PM)?\s*-\s*(\d{1,2}):?(\d{2})?\s*(AM|PM)?",
    re.IGNORECASE,
)


def _to_24_hour(hour: int, meridiem: Optional[str]) -> int:
    # Only PM is normalised; 12 AM is left as 12.
    if meridiem and meridiem.upper() == "PM" and hour != 12:
        return hour + 12
    return hour


@dataclass(frozen=True)
class TimeRange:
    start_minutes: int
    end_minutes: int

    @property
    def minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @classmethod
    def parse(cls, text: str) -> Optional["TimeRange"]:
        """Parse ``H[:MM] [AM|PM] - H[:MM] [AM|PM]``; ``None`` when it does not match."""
        match = _HOURS_PATTERN.search(text)
        if not match:
            return None

        start_hour, start_min, start_meridiem, end_hour, end_min, end_meridiem = match.groups()
        start = _to_24_hour(int(start_hour), start_meridiem) * 60 + int(start_min or 0)
        end = _to_24_hour(int(end_hour), end_meridiem) * 60 + int(end_min or 0)
        return cls(start_minutes=start, end_minutes=end)


def calculate_total_slots(working_hours: str) -> int:
    """Return the number of bookable 30 minute slots within ``working_hours``.

    Unrecognised or unparseable text yields ``DEFAULT_TOTAL_SLOTS``; this
    function never raises.
    """
    try:
        time_range = TimeRange.parse(working_hours)
    except (TypeError, ValueError):
        logger.debug("Could not parse working hours %r", working_hours)
        return DEFAULT_TOTAL_SLOTS

    if time_range is None:
        return DEFAULT_TOTAL_SLOTS
    return time_range.minutes // SLOT_MINUTES


def utilization_rate(booked: int, total: int) -> str:
    if total <= 0:
        return "0"
    return f"{booked / total * 100:.1f}"


_TIME_OF_DAY_PATTERN = re.compile(r"^\s*(\d{1,2}):?(\d{2})?\s*(AM|PM)?\s*$", re.IGNORECASE)


def time_of_day_minutes(text: str) -> Optional[int]:
    """Minutes since midnight for ``"10:00"`` or ``"02:30 PM"`` style times."""
    match = _TIME_OF_DAY_PATTERN.match(text or "")
    if not match:
        return None
    hour, minute, meridiem = match.groups()
    return _to_24_hour(int(hour), meridiem) * 60 + int(minute or 0)
