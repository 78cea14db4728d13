from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import date
from typing import Callable, Sequence

from venue_booking.application.exceptions import SlotFeedError
from venue_booking.application.ports.slot_feed import SlotFeedPort
from venue_booking.application.utils.slots import bookable_slots
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.time_slot import SlotAvailability, TimeSlot
from venue_booking.domain.entities.wizard_step import SlotStatus

SlotKey = tuple[int, "int | None", date]
SlotListener = Callable[[list[TimeSlot], bool], None]


class SlotReconciler:
    """
    Keeps the bookable slots for one (package, room, date) in step with the live feed.

    At most one subscription is live. Every watch or stop bumps a generation
    counter before it awaits anything, so a call that is overtaken while it waits
    for the old consumer to wind down leaves the newer subscription alone.
    """

    def __init__(self, feed: SlotFeedPort, on_update: SlotListener | None = None) -> None:
        self._feed = feed
        self._on_update = on_update
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self._key: SlotKey | None = None
        self._restrictions: tuple[DayOff, ...] = ()
        self._slots: list[TimeSlot] = []
        self._booked: list[TimeSlot] = []
        self._status = SlotStatus.IDLE
        self._logger = logging.getLogger(__name__)

    @property
    def key(self) -> SlotKey | None:
        return self._key

    @property
    def status(self) -> SlotStatus:
        return self._status

    @property
    def slots(self) -> list[TimeSlot]:
        return list(self._slots)

    @property
    def booked_slots(self) -> list[TimeSlot]:
        return list(self._booked)

    @property
    def is_live(self) -> bool:
        return self._task is not None and not self._task.done()

    async def watch(
        self,
        package_id: int,
        room_id: int | None,
        day: date,
        restrictions: Sequence[DayOff] = (),
    ) -> None:
        key: SlotKey = (package_id, room_id, day)
        if key == self._key and self.is_live:
            return

        self._generation += 1
        generation = self._generation
        previous, self._task = self._task, None
        self._key = key
        self._restrictions = tuple(restrictions)
        self._slots = []
        self._booked = []
        self._status = SlotStatus.LOADING

        await self._cancel(previous)
        if generation != self._generation:
            # A later watch or stop took over while the old consumer wound down
            return

        self._task = asyncio.create_task(self._consume(key, generation))
        self._logger.info(
            "Slot subscription opened",
            extra={"package_id": package_id, "room_id": room_id, "date": day.isoformat()},
        )

    async def retry(self) -> None:
        if self._key is None or self.is_live:
            return
        package_id, room_id, day = self._key
        self._key = None
        await self.watch(package_id, room_id, day, self._restrictions)

    async def stop(self) -> None:
        self._generation += 1
        previous, self._task = self._task, None
        self._key = None
        self._slots = []
        self._booked = []
        self._status = SlotStatus.IDLE
        await self._cancel(previous)

    async def _cancel(self, task: asyncio.Task[None] | None) -> None:
        if task is None or task.done():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        self._logger.info("Slot subscription closed", extra={"reason": "superseded"})

    async def _consume(self, key: SlotKey, generation: int) -> None:
        first_message = True
        try:
            async for availability in self._feed.stream(*key):
                if generation != self._generation:
                    return
                self._apply(availability, first_message)
                first_message = False
        except SlotFeedError as e:
            self._logger.warning("Slot feed failed", extra={"error": str(e)})
            self._fail(generation)
            return
        except Exception:
            self._logger.exception("Slot feed consumer crashed", extra={"package_id": key[0]})
            self._fail(generation)
            return

        if first_message and generation == self._generation:
            # Feed closed before sending anything
            self._status = SlotStatus.UNAVAILABLE

    def _fail(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._slots = []
        self._booked = []
        self._status = SlotStatus.UNAVAILABLE

    def _apply(self, availability: SlotAvailability, first_message: bool) -> None:
        self._slots = bookable_slots(availability, self._restrictions)
        self._booked = list(availability.booked_slots)
        self._status = SlotStatus.READY
        if self._on_update is not None:
            self._on_update(list(self._slots), first_message)
