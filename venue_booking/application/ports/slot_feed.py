from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import AsyncIterator

from venue_booking.domain.entities.time_slot import SlotAvailability


class SlotFeedPort(ABC):
    @abstractmethod
    def stream(self, package_id: int, room_id: int | None, day: date) -> AsyncIterator[SlotAvailability]:
        """
        Open a live feed of slot availability for a package, room and date.
        Yields one message per upstream booking change until the consumer stops
        iterating; closing the iterator releases the connection.
        Raises SlotFeedError when the feed fails.
        """
        raise NotImplementedError
