from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


@dataclass(frozen=True, order=True)
class TimeSlot:
    start: time
    end: time

    @staticmethod
    def starting_at(start: time, duration_minutes: int) -> "TimeSlot":
        begin = datetime.combine(date.min, start)
        finish = begin + timedelta(minutes=duration_minutes)
        if finish.date() != begin.date():
            return TimeSlot(start=start, end=time.max)
        return TimeSlot(start=start, end=finish.time())

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class SlotAvailability:
    """One message of the live slot feed for a (package, room, date)."""

    available_slots: tuple[TimeSlot, ...] = ()
    booked_slots: tuple[TimeSlot, ...] = ()
