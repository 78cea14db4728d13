from __future__ import annotations

import asyncio
from datetime import date, time
from decimal import Decimal

import pytest

from venue_booking.domain.entities.availability_rule import DailyRule
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
from venue_booking.infrastructure.booking.memory_booking_service import MemoryBookingService
from venue_booking.infrastructure.catalog.memory_catalog import MemoryCatalog
from venue_booking.infrastructure.payments.mock_payment_gateway import MockPaymentGateway
from venue_booking.infrastructure.slots.memory_slot_feed import MemorySlotFeed

TODAY = date(2026, 3, 2)
VALID_CARD = "4111 1111 1111 1111"


async def settle(rounds: int = 5) -> None:
    """Let background slot consumers run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def party_package() -> Package:
    return Package(
        id=1,
        name="Birthday Party",
        price=Decimal("100"),
        max_participants=10,
        capacity=20,
        price_per_additional=Decimal("12.50"),
        duration=Duration(Decimal("1"), "hours"),
        availability=DailyRule(),
        window=OperatingWindow(time(9, 0), time(17, 0), 30),
        partial_payment=PartialPaymentPolicy(percentage=Decimal("20"), fixed=Decimal("50")),
        attractions=(
            Attraction(id=11, name="Laser Tag", price=Decimal("5"), pricing_type="per_person"),
            Attraction(id=12, name="Arcade Card", price=Decimal("10"), min_quantity=2, max_quantity=5),
        ),
        add_ons=(
            AddOn(
                id=21,
                name="Party Host",
                price=Decimal("40"),
                is_forced=True,
                package_prices=(PackagePrice(package_id=1, price=Decimal("30")),),
            ),
            AddOn(id=22, name="Pizza", price=Decimal("18"), max_quantity=4),
            AddOn(id=23, name="Balloons", price=Decimal("9"), is_forced=True),
        ),
        promos=(
            Promo(id=41, code="SAVE10", discount_type="percentage", value=Decimal("10")),
            Promo(id=42, code="OLD", value=Decimal("5"), status="inactive"),
            Promo(id=43, code="BIG", value=Decimal("200")),
        ),
        gift_cards=(GiftCard(id=51, code="GIFT5", value=Decimal("5")),),
    )


@pytest.fixture
def room_package() -> Package:
    return Package(
        id=2,
        name="Private Room",
        price=Decimal("80"),
        max_participants=6,
        capacity=8,
        duration=Duration(Decimal("60"), "minutes"),
        window=OperatingWindow(time(10, 0), time(13, 0), 60),
        rooms=(Room(id=31, name="Room A", capacity=8), Room(id=32, name="Room B", capacity=8)),
    )


@pytest.fixture
def catalog(party_package: Package, room_package: Package) -> MemoryCatalog:
    return MemoryCatalog([party_package, room_package])


@pytest.fixture
def feed(catalog: MemoryCatalog) -> MemorySlotFeed:
    return MemorySlotFeed(catalog)


@pytest.fixture
def booking_service() -> MemoryBookingService:
    return MemoryBookingService()


@pytest.fixture
def payment_gateway() -> MockPaymentGateway:
    return MockPaymentGateway()
