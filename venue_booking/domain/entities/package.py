from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from decimal import Decimal

from venue_booking.domain.entities.availability_rule import AvailabilityRule, DailyRule

ZERO = Decimal("0")


@dataclass(frozen=True)
class Duration:
    value: Decimal
    unit: str = "hours"  # "minutes", "hours", "hours and minutes", "days"

    @property
    def minutes(self) -> int:
        unit = self.unit.lower().strip()
        if unit == "minutes":
            return int(self.value)
        if unit == "days":
            return int(self.value * 24 * 60)
        # "hours and minutes" is carried as decimal hours
        return int((self.value * 60).to_integral_value())


@dataclass(frozen=True)
class OperatingWindow:
    start: time
    end: time
    interval_minutes: int = 30


@dataclass(frozen=True)
class PartialPaymentPolicy:
    percentage: Decimal = ZERO
    fixed: Decimal = ZERO


@dataclass(frozen=True)
class Attraction:
    id: int
    name: str
    price: Decimal
    pricing_type: str = "per_unit"  # "per_person" | "per_unit"
    min_quantity: int = 1
    max_quantity: int = 99

    @property
    def is_per_person(self) -> bool:
        return self.pricing_type == "per_person"


@dataclass(frozen=True)
class PackagePrice:
    package_id: int
    price: Decimal
    minimum_quantity: int = 1


@dataclass(frozen=True)
class AddOn:
    id: int
    name: str
    price: Decimal = ZERO
    min_quantity: int = 1
    max_quantity: int = 99
    is_forced: bool = False
    package_prices: tuple[PackagePrice, ...] = ()

    def _override(self, package_id: int) -> PackagePrice | None:
        for entry in self.package_prices:
            if entry.package_id == package_id:
                return entry
        return None

    def price_for(self, package_id: int) -> Decimal:
        override = self._override(package_id)
        return override.price if override else self.price

    def min_quantity_for(self, package_id: int) -> int:
        override = self._override(package_id)
        return override.minimum_quantity if override else self.min_quantity

    def is_forced_for(self, package_id: int) -> bool:
        # Forced add-ons only bind packages they carry a price override for
        return self.is_forced and self._override(package_id) is not None


@dataclass(frozen=True)
class Room:
    id: int
    name: str
    capacity: int | None = None


@dataclass(frozen=True)
class DiscountCode:
    id: int | None
    code: str
    discount_type: str = "fixed"  # "fixed" | "percentage"
    value: Decimal = ZERO
    status: str = "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def amount_off(self, amount: Decimal) -> Decimal:
        if self.discount_type == "percentage":
            return amount * self.value / 100
        return self.value


@dataclass(frozen=True)
class Promo(DiscountCode):
    pass


@dataclass(frozen=True)
class GiftCard(DiscountCode):
    pass


@dataclass(frozen=True)
class Package:
    id: int
    name: str
    price: Decimal
    max_participants: int = 1  # guests covered by the base price
    capacity: int | None = None
    price_per_additional: Decimal | None = None
    duration: Duration = Duration(Decimal("2"))
    availability: AvailabilityRule = DailyRule()
    window: OperatingWindow = OperatingWindow(start=time(9, 0), end=time(17, 0))
    partial_payment: PartialPaymentPolicy = PartialPaymentPolicy()
    attractions: tuple[Attraction, ...] = ()
    add_ons: tuple[AddOn, ...] = ()
    rooms: tuple[Room, ...] = ()
    promos: tuple[Promo, ...] = ()
    gift_cards: tuple[GiftCard, ...] = ()
    booking_window_days: int | None = None

    @property
    def has_rooms(self) -> bool:
        return bool(self.rooms)

    def horizon_days(self, default: int) -> int:
        """Days of dates to offer; a package or location booking window overrides the default."""
        if self.booking_window_days is None:
            return default
        return max(1, self.booking_window_days)

    def find_attraction(self, attraction_id: int) -> Attraction | None:
        return next((a for a in self.attractions if a.id == attraction_id), None)

    def find_add_on(self, add_on_id: int) -> AddOn | None:
        return next((a for a in self.add_ons if a.id == add_on_id), None)

    def find_room(self, room_id: int) -> Room | None:
        return next((r for r in self.rooms if r.id == room_id), None)

    def find_promo(self, code: str | None) -> Promo | None:
        return _find_code(self.promos, code)

    def find_gift_card(self, code: str | None) -> GiftCard | None:
        return _find_code(self.gift_cards, code)


def _find_code(codes, code):
    wanted = (code or "").strip()
    if not wanted:
        return None
    return next((c for c in codes if c.code == wanted), None)
