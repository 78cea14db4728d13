from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field


class AttractionLineDTO(BaseModel):
    attraction_id: int
    quantity: int
    price_at_booking: float


class AddOnLineDTO(BaseModel):
    addon_id: int
    quantity: int
    price_at_booking: float


class BookingRequestDTO(BaseModel):
    guest_name: str
    guest_email: str
    guest_phone: str
    location_id: int
    package_id: int
    room_id: int | None = None
    type: Literal["package"] = "package"
    booking_date: date
    booking_time: str  # HH:MM
    participants: int
    duration: float
    duration_unit: Literal["minutes", "hours", "hours and minutes"] = "hours"
    total_amount: float
    amount_paid: float
    payment_method: Literal["card", "in-store", "pay_later"]
    payment_status: Literal["pending", "partial", "paid"]
    status: Literal["pending", "confirmed"]
    promo_id: int | None = None
    gift_card_id: int | None = None
    notes: str | None = None
    additional_attractions: list[AttractionLineDTO] = Field(default_factory=list)
    additional_addons: list[AddOnLineDTO] = Field(default_factory=list)
