"""
Common Value Objects

Value objects used across the reservation domain:
- TimeSlot: Half-open range of wall-clock time within one day
- Period: A named entry of a tenant's schedule template
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Mapping

from shared.domain.base import ValueObject

CLOCK_FORMAT = "%H:%M"


def parse_clock_time(value: Any) -> time:
    """
    Parse an "HH:MM" string (or pass a time through)

    Raises ValueError for anything that is not a valid wall-clock time.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid time: {value!r}")
    return time.fromisoformat(value.strip()).replace(second=0, microsecond=0)


def format_clock_time(value: time) -> str:
    return value.strftime(CLOCK_FORMAT)


@dataclass(frozen=True)
class TimeSlot(ValueObject):
    """
    Time slot value object

    Represents [start, end) on a single day. A booking occupies exactly
    one slot spanning one or more contiguous template periods.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Slot start ({self.start}) must be before end ({self.end})")

    def overlaps_with(self, other: 'TimeSlot') -> bool:
        """
        Check if this slot overlaps with another

        Adjacent slots do not overlap:
            - 09:00-09:40 and 09:40-10:20 -> False
            - 09:00-10:00 and 09:30-10:30 -> True
        """
        if not isinstance(other, TimeSlot):
            raise TypeError("Can only check overlap with another TimeSlot")
        return self.start < other.end and self.end > other.start

    def __str__(self):
        return f"{format_clock_time(self.start)}-{format_clock_time(self.end)}"

    def __repr__(self):
        return f"TimeSlot({self})"


@dataclass(frozen=True)
class Period(ValueObject):
    """
    Schedule period value object

    A named, fixed time range of a tenant's schedule template
    (e.g. "Period 1", 09:00-09:40). Periods are not validated on
    construction: the template store reports invalid entries itself.
    """
    name: str
    start: time
    end: time

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Period':
        return cls(
            name=str(data.get("name") or "").strip(),
            start=parse_clock_time(data.get("start")),
            end=parse_clock_time(data.get("end")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "start": format_clock_time(self.start),
            "end": format_clock_time(self.end),
        }

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and self.start < self.end

    def is_current(self, now: time) -> bool:
        """Inclusive on both ends, as shown on the booking grid."""
        return self.start <= now <= self.end

    def __str__(self):
        return f"{self.name} ({format_clock_time(self.start)}-{format_clock_time(self.end)})"
