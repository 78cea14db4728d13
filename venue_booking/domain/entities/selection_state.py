from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal


@dataclass(frozen=True)
class AttractionSelection:
    attraction_id: int
    quantity: int = 1


@dataclass(frozen=True)
class AddOnSelection:
    add_on_id: int
    quantity: int = 1
    forced: bool = False


@dataclass(frozen=True)
class CustomerInfo:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}".strip()


@dataclass(frozen=True)
class CardDetails:
    number: str = ""
    month: str = ""
    year: str = ""
    cvv: str = ""


@dataclass(frozen=True)
class SelectionState:
    package_id: int | None = None
    room_id: int | None = None
    booking_date: date | None = None
    booking_time: time | None = None
    participants: int = 0
    attractions: tuple[AttractionSelection, ...] = ()
    add_ons: tuple[AddOnSelection, ...] = ()
    promo_code: str = ""
    gift_card_code: str = ""
    payment_method: str = "card"  # "card", "in-store", "pay_later"
    payment_split: str = "full"  # "full", "partial", "custom"
    custom_amount: Decimal = Decimal("0")
    customer: CustomerInfo = CustomerInfo()
    notes: str = ""
