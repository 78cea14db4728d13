from __future__ import annotations

import logging
from datetime import date, time
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from venue_booking.domain.entities.availability_rule import (
    AvailabilityRule,
    CombinedRule,
    DailyRule,
    DayOfMonth,
    LastDayOfMonth,
    MonthlyPattern,
    MonthlyRule,
    NthWeekday,
    Ordinal,
    Weekday,
    WeeklyRule,
)
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

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_START = time(9, 0)
DEFAULT_WINDOW_END = time(17, 0)


def parse_clock(value: str | None) -> time | None:
    """Parse "HH:MM" or "HH:MM:SS"."""
    if not value:
        return None
    try:
        return time.fromisoformat(value.strip()[:8])
    except ValueError:
        return None


def _money(value: Any) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    return Decimal(str(value))


def parse_monthly_pattern(raw: str) -> MonthlyPattern | None:
    """Parse "sunday-last", "monday-first", "15" or "last-day"."""
    text = (raw or "").strip().lower()
    if not text:
        return None
    if text in {"last-day", "last_day", "lastday"}:
        return LastDayOfMonth()
    if text.isdigit():
        day = int(text)
        return DayOfMonth(day) if 1 <= day <= 31 else None
    day_name, _, occurrence = text.partition("-")
    try:
        return NthWeekday(weekday=Weekday.from_name(day_name), ordinal=Ordinal(occurrence))
    except (KeyError, ValueError):
        return None


def _weekdays(names: list[str]) -> frozenset[Weekday]:
    days: set[Weekday] = set()
    for name in names:
        try:
            days.add(Weekday.from_name(name))
        except KeyError:
            logger.warning("Ignoring unknown weekday in schedule", extra={"reason": name})
    return frozenset(days)


class AvailabilitySchedulePayload(BaseModel):
    availability_type: str = "daily"
    day_configuration: list[str] | None = None
    time_slot_start: str | None = None
    time_slot_end: str | None = None
    time_slot_interval: int | None = None
    priority: int = 0
    is_active: bool = True

    def to_rule(self) -> AvailabilityRule:
        kind = self.availability_type.strip().lower()
        days = self.day_configuration or []
        if kind == "weekly":
            return WeeklyRule(weekdays=_weekdays(days))
        if kind == "monthly":
            patterns = [parse_monthly_pattern(p) for p in days]
            return MonthlyRule(patterns=tuple(p for p in patterns if p is not None))
        # A daily schedule without a day list runs every day
        return DailyRule(weekdays=_weekdays(days)) if days else DailyRule()

    def to_window(self, default_interval: int) -> OperatingWindow:
        return OperatingWindow(
            start=parse_clock(self.time_slot_start) or DEFAULT_WINDOW_START,
            end=parse_clock(self.time_slot_end) or DEFAULT_WINDOW_END,
            interval_minutes=self.time_slot_interval or default_interval,
        )


class PackagePricePayload(BaseModel):
    package_id: int
    price: float
    minimum_quantity: int = 1


class AttractionPayload(BaseModel):
    id: int
    name: str = ""
    price: float = 0
    pricing_type: str = "per_unit"
    min_quantity: int | None = None
    max_quantity: int | None = None


class AddOnPayload(BaseModel):
    id: int
    name: str = ""
    price: float | None = None
    min_quantity: int | None = None
    max_quantity: int | None = None
    is_force_add_on: bool = False
    price_each_packages: list[PackagePricePayload] | None = None


class RoomPayload(BaseModel):
    id: int
    name: str = ""
    capacity: int | None = None


class DiscountPayload(BaseModel):
    id: int | None = None
    code: str
    type: str = "fixed"
    discount_value: float = 0
    status: str = "active"


class LocationPayload(BaseModel):
    id: int | None = None
    name: str = ""
    booking_window_days: int | None = None


class PackagePayloadDTO(BaseModel):
    id: int
    name: str = ""
    price: float = 0
    price_per_additional: float | None = None
    min_participants: int | None = None
    max_participants: int | None = None
    duration: float | None = None
    duration_unit: str | None = None
    partial_payment_percentage: float | None = None
    partial_payment_fixed: float | None = None
    availability_schedules: list[AvailabilitySchedulePayload] = Field(default_factory=list)
    attractions: list[AttractionPayload] = Field(default_factory=list)
    add_ons: list[AddOnPayload] = Field(default_factory=list)
    rooms: list[RoomPayload] = Field(default_factory=list)
    promos: list[DiscountPayload] = Field(default_factory=list)
    gift_cards: list[DiscountPayload] = Field(default_factory=list)
    booking_window_days: int | None = None
    location: LocationPayload | None = None

    def active_schedules(self) -> list[AvailabilitySchedulePayload]:
        """Active schedules, highest priority first."""
        active = [s for s in self.availability_schedules if s.is_active]
        return sorted(active, key=lambda s: s.priority, reverse=True)

    def to_rule(self) -> AvailabilityRule:
        rules = [schedule.to_rule() for schedule in self.active_schedules()]
        if not rules:
            # No active schedule: nothing is bookable
            return WeeklyRule(weekdays=frozenset())
        if len(rules) == 1:
            return rules[0]
        return CombinedRule(rules=tuple(rules))

    def window_days(self) -> int | None:
        if self.booking_window_days is not None:
            return self.booking_window_days
        return self.location.booking_window_days if self.location else None

    def to_entity(self, default_interval: int = 30) -> Package:
        schedules = self.active_schedules()
        # Slot times come from the highest-priority schedule
        if schedules:
            window = schedules[0].to_window(default_interval)
        else:
            window = OperatingWindow(DEFAULT_WINDOW_START, DEFAULT_WINDOW_END, default_interval)

        # The base price covers min_participants guests; max_participants is the hard cap
        return Package(
            id=self.id,
            name=self.name,
            price=_money(self.price),
            max_participants=self.min_participants or 1,
            capacity=self.max_participants,
            price_per_additional=_money(self.price_per_additional) if self.price_per_additional else None,
            duration=Duration(
                value=_money(self.duration if self.duration is not None else 2),
                unit=self.duration_unit or "hours",
            ),
            availability=self.to_rule(),
            window=window,
            partial_payment=PartialPaymentPolicy(
                percentage=_money(self.partial_payment_percentage),
                fixed=_money(self.partial_payment_fixed),
            ),
            attractions=tuple(
                Attraction(
                    id=a.id,
                    name=a.name,
                    price=_money(a.price),
                    pricing_type=a.pricing_type or "per_unit",
                    min_quantity=a.min_quantity if a.min_quantity is not None else 1,
                    max_quantity=a.max_quantity if a.max_quantity is not None else 99,
                )
                for a in self.attractions
            ),
            add_ons=tuple(
                AddOn(
                    id=a.id,
                    name=a.name,
                    price=_money(a.price),
                    min_quantity=a.min_quantity or 1,
                    max_quantity=a.max_quantity if a.max_quantity is not None else 99,
                    is_forced=a.is_force_add_on,
                    package_prices=tuple(
                        PackagePrice(
                            package_id=p.package_id,
                            price=_money(p.price),
                            minimum_quantity=p.minimum_quantity,
                        )
                        for p in a.price_each_packages or []
                    ),
                )
                for a in self.add_ons
            ),
            rooms=tuple(Room(id=r.id, name=r.name, capacity=r.capacity) for r in self.rooms),
            promos=tuple(
                Promo(id=p.id, code=p.code, discount_type=p.type, value=_money(p.discount_value), status=p.status)
                for p in self.promos
            ),
            gift_cards=tuple(
                GiftCard(id=g.id, code=g.code, discount_type=g.type, value=_money(g.discount_value), status=g.status)
                for g in self.gift_cards
            ),
            booking_window_days=self.window_days(),
        )


class DayOffPayloadDTO(BaseModel):
    day: date = Field(alias="date")
    reason: str | None = None
    is_recurring: bool = False
    time_start: str | None = None
    time_end: str | None = None
    package_ids: list[int] | None = None
    room_ids: list[int] | None = None

    def to_entity(self) -> DayOff:
        return DayOff(
            day=self.day,
            closes_at=parse_clock(self.time_start),
            opens_at=parse_clock(self.time_end),
            package_ids=tuple(self.package_ids or ()),
            room_ids=tuple(self.room_ids or ()),
            is_recurring=self.is_recurring,
            reason=self.reason,
        )
