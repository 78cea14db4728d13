from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Sequence

from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.time_slot import SlotAvailability, TimeSlot


def candidate_slots(
    window_start: time,
    window_end: time,
    duration_minutes: int,
    interval_minutes: int,
) -> list[TimeSlot]:
    """Walk the window in interval steps; each slot spans the full duration and ends inside the window."""
    if duration_minutes <= 0 or interval_minutes <= 0:
        return []

    current = datetime.combine(date.min, window_start)
    end = datetime.combine(date.min, window_end)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)

    slots: list[TimeSlot] = []
    while current + duration <= end:
        slots.append(TimeSlot(start=current.time(), end=(current + duration).time()))
        current += step
    return slots


def remove_booked(slots: Iterable[TimeSlot], booked: Iterable[TimeSlot]) -> list[TimeSlot]:
    taken = list(booked)
    return [slot for slot in slots if not any(slot.overlaps(b) for b in taken)]


def restrictions_for(
    day: date,
    day_offs: Iterable[DayOff],
    package_id: int | None,
    room_id: int | None = None,
) -> list[DayOff]:
    return [
        off
        for off in day_offs
        if not off.is_full_day and off.occurs_on(day) and off.applies_to(package_id, room_id)
    ]


def bookable_slots(availability: SlotAvailability, restrictions: Sequence[DayOff] = ()) -> list[TimeSlot]:
    """Narrow one feed message to the slots still bookable, ordered by start time."""
    slots = remove_booked(availability.available_slots, availability.booked_slots)
    slots = [slot for slot in slots if not any(off.restricts(slot) for off in restrictions)]
    return sorted(set(slots))


def choose_time(current: time | None, slots: Sequence[TimeSlot], first_message: bool) -> time | None:
    """
    Keep the selected start time while it stays bookable. The first message of a
    subscription fills in the earliest slot; later messages only move a selection
    that is no longer offered.
    """
    starts = [slot.start for slot in slots]
    if current is not None and current in starts:
        return current
    if first_message or current is not None:
        return starts[0] if starts else None
    return None
