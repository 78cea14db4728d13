from __future__ import annotations

import asyncio
from datetime import date, time
from typing import AsyncIterator

import pytest

from conftest import settle
from venue_booking.application.exceptions import SlotFeedError, UpstreamServiceError
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.application.use_cases.slot_reconciler import SlotReconciler
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.time_slot import SlotAvailability, TimeSlot
from venue_booking.domain.entities.wizard_step import SlotStatus

DAY = date(2026, 3, 10)


class SilentFeed(SlotFeedPort):
    """Closes without ever sending a message."""

    async def stream(self, package_id, room_id, day) -> AsyncIterator[SlotAvailability]:
        return
        yield


class BrokenFeed(SlotFeedPort):
    async def stream(self, package_id, room_id, day) -> AsyncIterator[SlotAvailability]:
        raise SlotFeedError("connection reset")
        yield


class CatalogDownFeed(SlotFeedPort):
    async def stream(self, package_id, room_id, day) -> AsyncIterator[SlotAvailability]:
        raise UpstreamServiceError("catalog unreachable")
        yield


@pytest.mark.asyncio
async def test_first_message_replaces_working_set(feed):
    updates = []
    reconciler = SlotReconciler(feed, on_update=lambda slots, first: updates.append((len(slots), first)))

    await reconciler.watch(1, None, DAY)
    assert reconciler.status is SlotStatus.LOADING
    await settle()

    assert reconciler.status is SlotStatus.READY
    assert reconciler.slots[0] == TimeSlot(time(9, 0), time(10, 0))
    assert len(reconciler.slots) == 15
    assert updates == [(15, True)]
    await reconciler.stop()


@pytest.mark.asyncio
async def test_bookings_narrow_slots_live(feed):
    updates = []
    reconciler = SlotReconciler(feed, on_update=lambda slots, first: updates.append(first))
    await reconciler.watch(1, None, DAY)
    await settle()

    feed.book(1, None, DAY, TimeSlot(time(9, 0), time(10, 0)))
    await settle()

    starts = [slot.start for slot in reconciler.slots]
    assert time(9, 0) not in starts
    assert time(9, 30) not in starts
    assert starts[0] == time(10, 0)
    assert reconciler.booked_slots == [TimeSlot(time(9, 0), time(10, 0))]
    assert updates == [True, False]
    await reconciler.stop()


@pytest.mark.asyncio
async def test_partial_closures_trim_every_message(feed):
    reconciler = SlotReconciler(feed)
    await reconciler.watch(1, None, DAY, restrictions=[DayOff(day=DAY, closes_at=time(12, 0))])
    await settle()

    assert reconciler.slots[-1] == TimeSlot(time(11, 0), time(12, 0))
    await reconciler.stop()


@pytest.mark.asyncio
async def test_only_one_subscription_is_live(feed):
    reconciler = SlotReconciler(feed)

    await reconciler.watch(1, None, DAY)
    await settle()
    await reconciler.watch(1, None, DAY)
    await settle()
    assert feed.active_subscriptions == 1

    await reconciler.watch(1, None, date(2026, 3, 11))
    await settle()
    assert feed.active_subscriptions == 1
    assert reconciler.key == (1, None, date(2026, 3, 11))

    await reconciler.stop()
    await settle()
    assert feed.active_subscriptions == 0
    assert reconciler.status is SlotStatus.IDLE


@pytest.mark.asyncio
async def test_feed_error_empties_slots_and_is_retryable(feed):
    reconciler = SlotReconciler(feed)
    await reconciler.watch(1, None, DAY)
    await settle()

    feed.fail(1, None, DAY)
    await settle()
    assert reconciler.status is SlotStatus.UNAVAILABLE
    assert reconciler.slots == []
    assert not reconciler.is_live

    await reconciler.retry()
    await settle()
    assert reconciler.status is SlotStatus.READY
    assert reconciler.slots
    await reconciler.stop()


@pytest.mark.asyncio
async def test_stream_closing_before_first_message_is_unavailable():
    reconciler = SlotReconciler(SilentFeed())
    await reconciler.watch(1, None, DAY)
    await settle()

    assert reconciler.status is SlotStatus.UNAVAILABLE
    assert reconciler.slots == []


@pytest.mark.asyncio
async def test_stream_failure_before_first_message():
    reconciler = SlotReconciler(BrokenFeed())
    await reconciler.watch(1, None, DAY)
    await settle()

    assert reconciler.status is SlotStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_unexpected_feed_errors_are_unavailable_and_retryable():
    reconciler = SlotReconciler(CatalogDownFeed())
    await reconciler.watch(1, None, DAY)
    await settle()

    assert reconciler.status is SlotStatus.UNAVAILABLE
    assert reconciler.slots == []
    assert not reconciler.is_live

    await reconciler.retry()
    await settle()
    assert reconciler.status is SlotStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_overlapping_watches_leave_one_subscription(feed):
    reconciler = SlotReconciler(feed)
    await reconciler.watch(1, None, DAY)
    await settle()

    await asyncio.gather(
        reconciler.watch(1, None, date(2026, 3, 11)),
        reconciler.watch(1, None, date(2026, 3, 12)),
    )
    await settle()

    assert feed.active_subscriptions == 1
    assert reconciler.key == (1, None, date(2026, 3, 12))
    assert reconciler.status is SlotStatus.READY

    await reconciler.stop()
    await settle()
    assert feed.active_subscriptions == 0
