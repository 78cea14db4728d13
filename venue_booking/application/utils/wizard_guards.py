from __future__ import annotations

from venue_booking.application.utils.card import validate_card_number
from venue_booking.domain.entities.package import Package
from venue_booking.domain.entities.selection_state import CardDetails, CustomerInfo, SelectionState


def _filled(value: str | None) -> bool:
    return bool((value or "").strip())


def can_select_schedule(state: SelectionState) -> bool:
    return state.package_id is not None


def schedule_complete(state: SelectionState, package: Package | None) -> bool:
    if package is None or state.package_id != package.id:
        return False
    if state.booking_date is None or state.booking_time is None:
        return False
    if package.has_rooms and state.room_id is None:
        return False
    return True


def customer_complete(customer: CustomerInfo) -> bool:
    return all(
        _filled(value)
        for value in (customer.first_name, customer.last_name, customer.email, customer.phone)
    )


def missing_fields(state: SelectionState, package: Package | None) -> list[str]:
    """Names of the fields still blocking submission, in form order."""
    missing: list[str] = []
    if package is None or state.package_id != package.id:
        missing.append("package")
    if package is not None and package.has_rooms and state.room_id is None:
        missing.append("room")
    if state.booking_date is None:
        missing.append("date")
    if state.booking_time is None:
        missing.append("time")
    if state.participants <= 0:
        missing.append("participants")
    for name in ("first_name", "last_name", "email", "phone"):
        if not _filled(getattr(state.customer, name)):
            missing.append(name)
    return missing


def is_submit_ready(state: SelectionState, package: Package | None) -> bool:
    return not missing_fields(state, package)


def card_details_error(card: CardDetails) -> str | None:
    if not validate_card_number(card.number):
        return "Please enter a valid card number"
    if not (_filled(card.month) and _filled(card.year) and _filled(card.cvv)):
        return "Please fill in all card details"
    return None
