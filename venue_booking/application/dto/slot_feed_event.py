from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from venue_booking.application.dto.package_payload import parse_clock
from venue_booking.domain.entities.package import Duration
from venue_booking.domain.entities.time_slot import SlotAvailability, TimeSlot


class SlotPayload(BaseModel):
    start_time: str | None = None
    end_time: str | None = None
    time_slot_start: str | None = None
    duration: float | None = None
    duration_unit: str = "hours"

    def to_slot(self) -> TimeSlot | None:
        start = parse_clock(self.start_time or self.time_slot_start)
        if start is None:
            return None
        end = parse_clock(self.end_time)
        if end is not None:
            return TimeSlot(start=start, end=end)
        if self.duration is None:
            return None
        minutes = Duration(value=Decimal(str(self.duration)), unit=self.duration_unit).minutes
        return TimeSlot.starting_at(start, minutes)


class SlotFeedEventDTO(BaseModel):
    available_slots: list[SlotPayload] = Field(default_factory=list)
    booked_slots: list[SlotPayload] = Field(default_factory=list)

    def to_availability(self) -> SlotAvailability:
        return SlotAvailability(
            available_slots=_slots(self.available_slots),
            booked_slots=_slots(self.booked_slots),
        )


def _slots(payloads: list[SlotPayload]) -> tuple[TimeSlot, ...]:
    slots = (p.to_slot() for p in payloads)
    return tuple(s for s in slots if s is not None)
