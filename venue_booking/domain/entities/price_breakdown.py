from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceLine:
    item_id: int
    name: str
    unit_price: Decimal
    quantity: int
    amount: Decimal


@dataclass(frozen=True)
class PriceBreakdown:
    base: Decimal
    overage: Decimal
    attraction_lines: tuple[PriceLine, ...]
    add_on_lines: tuple[PriceLine, ...]
    subtotal: Decimal
    gift_card_discount: Decimal
    promo_discount: Decimal
    total: Decimal
    partial_due: Decimal

    @property
    def discount(self) -> Decimal:
        """Effective discount; never larger than the subtotal."""
        return self.subtotal - self.total

    @property
    def partial_available(self) -> bool:
        return self.partial_due > 0

    def to_payload(self) -> dict[str, object]:
        return {
            "base": float(round_money(self.base)),
            "overage": float(round_money(self.overage)),
            "attractions": [_line_payload(line) for line in self.attraction_lines],
            "add_ons": [_line_payload(line) for line in self.add_on_lines],
            "subtotal": float(round_money(self.subtotal)),
            "gift_card_discount": float(round_money(self.gift_card_discount)),
            "promo_discount": float(round_money(self.promo_discount)),
            "discount": float(round_money(self.discount)),
            "total": float(round_money(self.total)),
            "partial_due": float(round_money(self.partial_due)),
        }


def _line_payload(line: PriceLine) -> dict[str, object]:
    return {
        "id": line.item_id,
        "name": line.name,
        "unit_price": float(round_money(line.unit_price)),
        "quantity": line.quantity,
        "amount": float(round_money(line.amount)),
    }
