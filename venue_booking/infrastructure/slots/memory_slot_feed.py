from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import date
from typing import AsyncIterator

from venue_booking.application.exceptions import SlotFeedError
from venue_booking.application.ports.catalog import CatalogPort
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.application.utils.slots import candidate_slots
from venue_booking.domain.entities.time_slot import SlotAvailability, TimeSlot

FeedKey = tuple[int, "int | None", date]

_CLOSE = object()


class MemorySlotFeed(SlotFeedPort):
    """
    In-process slot feed. Offers every candidate slot of the package window and
    pushes a fresh message to open subscribers whenever a slot is booked.
    """

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog
        self._booked: dict[FeedKey, list[TimeSlot]] = defaultdict(list)
        self._subscribers: dict[FeedKey, list[asyncio.Queue[object]]] = defaultdict(list)
        self._logger = logging.getLogger(__name__)

    @property
    def active_subscriptions(self) -> int:
        return sum(len(queues) for queues in self._subscribers.values())

    async def stream(self, package_id: int, room_id: int | None, day: date) -> AsyncIterator[SlotAvailability]:
        key: FeedKey = (package_id, room_id, day)
        queue: asyncio.Queue[object] = asyncio.Queue()
        self._subscribers[key].append(queue)
        try:
            yield await self._snapshot(key)
            while True:
                item = await queue.get()
                if item is _CLOSE:
                    return
                if isinstance(item, SlotFeedError):
                    raise item
                yield await self._snapshot(key)
        finally:
            self._subscribers[key].remove(queue)

    def book(self, package_id: int, room_id: int | None, day: date, slot: TimeSlot) -> None:
        key: FeedKey = (package_id, room_id, day)
        self._booked[key].append(slot)
        self._logger.info(
            "Slot booked",
            extra={"package_id": package_id, "room_id": room_id, "date": day.isoformat()},
        )
        self._publish(key, None)

    def fail(self, package_id: int, room_id: int | None, day: date, message: str = "Slot feed failed") -> None:
        self._publish((package_id, room_id, day), SlotFeedError(message))

    def close(self, package_id: int, room_id: int | None, day: date) -> None:
        self._publish((package_id, room_id, day), _CLOSE)

    def _publish(self, key: FeedKey, item: object) -> None:
        for queue in list(self._subscribers.get(key, ())):
            queue.put_nowait(item)

    async def _snapshot(self, key: FeedKey) -> SlotAvailability:
        package = await self._catalog.get_package(key[0])
        if package is None:
            raise SlotFeedError(f"Package {key[0]} not found")
        window = package.window
        slots = candidate_slots(window.start, window.end, package.duration.minutes, window.interval_minutes)
        return SlotAvailability(available_slots=tuple(slots), booked_slots=tuple(self._booked[key]))
