from __future__ import annotations

from datetime import date, time

from venue_booking.application.utils.slots import (
    bookable_slots,
    candidate_slots,
    choose_time,
    remove_booked,
    restrictions_for,
)
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.time_slot import SlotAvailability, TimeSlot


def _slot(start: str, end: str) -> TimeSlot:
    return TimeSlot(time.fromisoformat(start), time.fromisoformat(end))


def test_candidate_slots_stay_inside_window():
    slots = candidate_slots(time(9, 0), time(17, 0), 60, 30)
    starts = [slot.start for slot in slots]

    assert starts[0] == time(9, 0)
    assert time(16, 0) in starts
    assert time(16, 30) not in starts
    assert slots[-1] == _slot("16:00", "17:00")
    assert len(slots) == 15


def test_candidate_slots_with_non_positive_inputs():
    assert candidate_slots(time(9, 0), time(17, 0), 60, 0) == []
    assert candidate_slots(time(9, 0), time(17, 0), 0, 30) == []
    assert candidate_slots(time(9, 0), time(9, 30), 60, 30) == []


def test_booked_slots_remove_overlapping_candidates():
    slots = candidate_slots(time(9, 0), time(12, 0), 60, 30)
    remaining = remove_booked(slots, [_slot("10:00", "11:00")])

    assert [s.start for s in remaining] == [time(9, 0), time(11, 0)]


def test_bookable_slots_apply_partial_closures():
    availability = SlotAvailability(
        available_slots=tuple(candidate_slots(time(9, 0), time(17, 0), 60, 60)),
        booked_slots=(_slot("09:00", "10:00"),),
    )
    closing_early = DayOff(day=date(2026, 3, 2), closes_at=time(15, 0))
    opening_late = DayOff(day=date(2026, 3, 2), opens_at=time(11, 0))

    slots = bookable_slots(availability, [closing_early, opening_late])

    assert [s.start for s in slots] == [time(11, 0), time(12, 0), time(13, 0), time(14, 0)]


def test_bookable_slots_are_sorted_and_unique():
    availability = SlotAvailability(
        available_slots=(_slot("11:00", "12:00"), _slot("09:00", "10:00"), _slot("11:00", "12:00")),
    )

    assert bookable_slots(availability) == [_slot("09:00", "10:00"), _slot("11:00", "12:00")]


def test_restrictions_only_return_partial_closures_for_scope():
    day = date(2026, 3, 2)
    offs = [
        DayOff(day=day),
        DayOff(day=day, closes_at=time(15, 0)),
        DayOff(day=day, opens_at=time(11, 0), room_ids=(7,)),
        DayOff(day=date(2026, 3, 3), closes_at=time(12, 0)),
    ]

    assert restrictions_for(day, offs, package_id=1, room_id=8) == [offs[1]]
    assert restrictions_for(day, offs, package_id=1, room_id=7) == [offs[1], offs[2]]


def test_first_message_fills_in_earliest_slot():
    slots = [_slot("10:00", "11:00"), _slot("11:00", "12:00")]

    assert choose_time(None, slots, first_message=True) == time(10, 0)
    assert choose_time(time(9, 0), slots, first_message=True) == time(10, 0)
    assert choose_time(None, [], first_message=True) is None


def test_later_messages_keep_a_bookable_selection():
    slots = [_slot("10:00", "11:00"), _slot("11:00", "12:00")]

    assert choose_time(time(11, 0), slots, first_message=False) == time(11, 0)
    assert choose_time(None, slots, first_message=False) is None
    # Selection was taken by someone else
    assert choose_time(time(12, 0), slots, first_message=False) == time(10, 0)
