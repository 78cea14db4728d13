from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from venue_booking.domain.entities.package import ZERO, Package
from venue_booking.domain.entities.price_breakdown import PriceBreakdown, PriceLine, round_money
from venue_booking.domain.entities.selection_state import AddOnSelection, AttractionSelection


def overage_amount(package: Package, participants: int) -> Decimal:
    if not package.price_per_additional:
        return ZERO
    extra = max(0, participants - package.max_participants)
    return extra * package.price_per_additional


def attraction_lines(
    package: Package,
    participants: int,
    selections: Sequence[AttractionSelection],
) -> tuple[PriceLine, ...]:
    lines: list[PriceLine] = []
    for selection in selections:
        attraction = package.find_attraction(selection.attraction_id)
        if attraction is None or selection.quantity <= 0:
            continue
        multiplier = participants if attraction.is_per_person else 1
        lines.append(
            PriceLine(
                item_id=attraction.id,
                name=attraction.name,
                unit_price=attraction.price,
                quantity=selection.quantity,
                amount=attraction.price * selection.quantity * multiplier,
            )
        )
    return tuple(lines)


def add_on_lines(package: Package, selections: Sequence[AddOnSelection]) -> tuple[PriceLine, ...]:
    lines: list[PriceLine] = []
    for selection in selections:
        add_on = package.find_add_on(selection.add_on_id)
        if add_on is None or selection.quantity <= 0:
            continue
        unit_price = add_on.price_for(package.id)
        lines.append(
            PriceLine(
                item_id=add_on.id,
                name=add_on.name,
                unit_price=unit_price,
                quantity=selection.quantity,
                amount=unit_price * selection.quantity,
            )
        )
    return tuple(lines)


def partial_payment_due(package: Package, total: Decimal) -> Decimal:
    """Percentage policy wins over fixed; zero means partial payment is not offered."""
    policy = package.partial_payment
    if policy.percentage > 0:
        return round_money(total * policy.percentage / 100)
    if policy.fixed > 0:
        return min(policy.fixed, total)
    return ZERO


def calculate_price(
    package: Package,
    participants: int,
    attractions: Sequence[AttractionSelection] = (),
    add_ons: Sequence[AddOnSelection] = (),
    promo_code: str | None = None,
    gift_card_code: str | None = None,
) -> PriceBreakdown:
    """
    Price an order. The gift card comes off the subtotal first and the promo then
    applies to what is left, so percentage promos compound on the reduced amount.
    """
    base = package.price
    overage = overage_amount(package, participants)
    attraction_items = attraction_lines(package, participants, attractions)
    add_on_items = add_on_lines(package, add_ons)

    subtotal = base + overage
    subtotal += sum((line.amount for line in attraction_items), ZERO)
    subtotal += sum((line.amount for line in add_on_items), ZERO)

    running = subtotal
    gift_card_discount = ZERO
    gift_card = package.find_gift_card(gift_card_code)
    if gift_card is not None and gift_card.is_active:
        gift_card_discount = gift_card.amount_off(running)
        running -= gift_card_discount

    promo_discount = ZERO
    promo = package.find_promo(promo_code)
    if promo is not None and promo.is_active and running > 0:
        promo_discount = promo.amount_off(running)
        running -= promo_discount

    total = max(ZERO, running)
    return PriceBreakdown(
        base=base,
        overage=overage,
        attraction_lines=attraction_items,
        add_on_lines=add_on_items,
        subtotal=subtotal,
        gift_card_discount=gift_card_discount,
        promo_discount=promo_discount,
        total=total,
        partial_due=partial_payment_due(package, total),
    )


def amount_due_now(
    breakdown: PriceBreakdown,
    payment_method: str,
    payment_split: str = "full",
    custom_amount: Decimal = ZERO,
) -> Decimal:
    if payment_method == "pay_later":
        return ZERO
    if payment_split == "partial" and breakdown.partial_available:
        return breakdown.partial_due
    if payment_split == "custom" and custom_amount > 0:
        return min(custom_amount, breakdown.total)
    return breakdown.total


def payment_status(amount_paid: Decimal, total: Decimal) -> str:
    if amount_paid <= 0:
        return "pending"
    if amount_paid < total:
        return "partial"
    return "paid"
