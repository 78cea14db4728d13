from datetime import date

from pydantic import BaseModel, Field


class DatesResponseSchema(BaseModel):
    package_id: int
    horizon_days: int
    dates: list[date]


class SlotSchema(BaseModel):
    start: str
    end: str


class SlotsResponseSchema(BaseModel):
    package_id: int
    room_id: int | None = None
    booking_date: date
    status: str
    slots: list[SlotSchema]
    booked: list[SlotSchema] = Field(default_factory=list)


class QuoteItemSchema(BaseModel):
    id: int
    quantity: int = Field(default=1, ge=1)


class QuoteRequestSchema(BaseModel):
    participants: int = Field(ge=1)
    attractions: list[QuoteItemSchema] = Field(default_factory=list)
    add_ons: list[QuoteItemSchema] = Field(default_factory=list)
    promo_code: str | None = None
    gift_card_code: str | None = None


class PriceLineSchema(BaseModel):
    id: int
    name: str
    unit_price: float
    quantity: int
    amount: float


class QuoteResponseSchema(BaseModel):
    package_id: int
    participants: int
    base: float
    overage: float
    attractions: list[PriceLineSchema]
    add_ons: list[PriceLineSchema]
    subtotal: float
    gift_card_discount: float
    promo_discount: float
    discount: float
    total: float
    partial_due: float
