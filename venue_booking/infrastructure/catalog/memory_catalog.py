from __future__ import annotations

from datetime import time
from decimal import Decimal
from typing import Iterable

from venue_booking.application.ports.catalog import CatalogPort
from venue_booking.domain.entities.availability_rule import DailyRule, MonthlyRule, NthWeekday, Ordinal, Weekday
from venue_booking.domain.entities.day_off import DayOff
from venue_booking.domain.entities.package import (
    AddOn,
    Attraction,
    Duration,
    GiftCard,
    OperatingWindow,
    Package,
    PackagePrice,
    PartialPaymentPolicy,
    Promo,
    Room,
)


class MemoryCatalog(CatalogPort):
    def __init__(self, packages: Iterable[Package] = (), day_offs: Iterable[DayOff] = ()) -> None:
        self._packages = {package.id: package for package in packages}
        self._day_offs = list(day_offs)

    def add_package(self, package: Package) -> None:
        self._packages[package.id] = package

    def add_day_off(self, day_off: DayOff) -> None:
        self._day_offs.append(day_off)

    async def get_package(self, package_id: int) -> Package | None:
        return self._packages.get(package_id)

    async def list_day_offs(self, location_id: int) -> list[DayOff]:
        return list(self._day_offs)


def demo_packages() -> list[Package]:
    """Packages served in dev so the API has something to book."""
    return [
        Package(
            id=1,
            name="Birthday Party",
            price=Decimal("250"),
            max_participants=10,
            capacity=30,
            price_per_additional=Decimal("15"),
            duration=Duration(Decimal("2"), "hours"),
            availability=DailyRule(),
            window=OperatingWindow(time(10, 0), time(20, 0), 30),
            partial_payment=PartialPaymentPolicy(percentage=Decimal("25")),
            attractions=(
                Attraction(id=11, name="Laser Tag", price=Decimal("8"), pricing_type="per_person"),
                Attraction(id=12, name="Arcade Card", price=Decimal("10"), max_quantity=20),
            ),
            add_ons=(
                AddOn(
                    id=21,
                    name="Party Host",
                    price=Decimal("40"),
                    is_forced=True,
                    package_prices=(PackagePrice(package_id=1, price=Decimal("30")),),
                ),
                AddOn(id=22, name="Pizza", price=Decimal("18"), max_quantity=10),
            ),
            rooms=(Room(id=31, name="Party Room A", capacity=20), Room(id=32, name="Party Room B", capacity=30)),
            promos=(Promo(id=41, code="SPRING10", discount_type="percentage", value=Decimal("10")),),
            gift_cards=(GiftCard(id=51, code="GIFT25", value=Decimal("25")),),
        ),
        Package(
            id=2,
            name="Family Bowling Night",
            price=Decimal("60"),
            max_participants=4,
            capacity=8,
            price_per_additional=Decimal("12"),
            duration=Duration(Decimal("90"), "minutes"),
            availability=MonthlyRule(patterns=(NthWeekday(Weekday.FRIDAY, Ordinal.LAST),)),
            window=OperatingWindow(time(17, 0), time(22, 0), 30),
            partial_payment=PartialPaymentPolicy(fixed=Decimal("20")),
        ),
    ]
