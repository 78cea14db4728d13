from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time

from venue_booking.domain.entities.time_slot import TimeSlot


@dataclass(frozen=True)
class DayOff:
    day: date
    closes_at: time | None = None  # venue closes from this time on
    opens_at: time | None = None  # venue opens late, at this time
    package_ids: tuple[int, ...] = ()
    room_ids: tuple[int, ...] = ()
    is_recurring: bool = False
    reason: str | None = None

    @property
    def is_full_day(self) -> bool:
        return self.closes_at is None and self.opens_at is None

    def occurs_on(self, day: date) -> bool:
        if self.is_recurring:
            return (self.day.month, self.day.day) == (day.month, day.day)
        return self.day == day

    def applies_to(self, package_id: int | None, room_id: int | None = None) -> bool:
        if self.package_ids and package_id not in self.package_ids:
            return False
        if self.room_ids and room_id is not None and room_id not in self.room_ids:
            return False
        return True

    def restricts(self, slot: TimeSlot) -> bool:
        if self.is_full_day:
            return True
        if self.closes_at is not None and (slot.start >= self.closes_at or slot.end > self.closes_at):
            return True
        if self.opens_at is not None and slot.start < self.opens_at:
            return True
        return False
