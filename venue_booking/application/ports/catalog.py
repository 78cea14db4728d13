from __future__ import annotations

from abc import ABC, abstractmethod

from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.package import Package


class CatalogPort(ABC):
    @abstractmethod
    async def get_package(self, package_id: int) -> Package | None:
        """Get a package with its attractions, add-ons, rooms and codes. None if not found."""
        raise NotImplementedError

    @abstractmethod
    async def list_day_offs(self, location_id: int) -> list[DayOff]:
        """Get full and partial closures for a location."""
        raise NotImplementedError
