from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from conftest import VALID_CARD
from venue_booking.application.use_cases.submit_booking import SubmitBookingUseCase, build_booking_request
from venue_booking.application.utils.pricing import calculate_price
from venue_booking.domain.entities.selection_state import (
    AddOnSelection,
    AttractionSelection,
    CardDetails,
    CustomerInfo,
    SelectionState,
)
from venue_booking.infrastructure.booking.memory_booking_service import MemoryBookingService
from venue_booking.infrastructure.payments.mock_payment_gateway import MockPaymentGateway

CARD = CardDetails(number=VALID_CARD.replace(" ", ""), month="12", year="2030", cvv="123")


def _state(**overrides) -> SelectionState:
    values = dict(
        package_id=1,
        booking_date=date(2026, 3, 10),
        booking_time=time(14, 30),
        participants=12,
        attractions=(AttractionSelection(11, 1),),
        add_ons=(AddOnSelection(21, 1, forced=True),),
        customer=CustomerInfo(first_name="Ana", last_name="Silva", email=" ana@example.com ", phone="555-0100"),
        notes="Cake at 3pm",
    )
    values.update(overrides)
    return SelectionState(**values)


def _use_case(booking_service, payment_gateway, **kwargs) -> SubmitBookingUseCase:
    return SubmitBookingUseCase(booking_service, payment_gateway, location_id=3, **kwargs)


def test_booking_request_carries_priced_selection(party_package):
    state = _state(promo_code="SAVE10")
    breakdown = calculate_price(
        party_package, 12, state.attractions, state.add_ons, promo_code="SAVE10"
    )
    request = build_booking_request(state, party_package, breakdown, breakdown.partial_due, location_id=3)

    assert request.guest_name == "Ana Silva"
    assert request.guest_email == "ana@example.com"
    assert request.booking_time == "14:30"
    assert request.duration == 1.0
    assert request.duration_unit == "hours"
    assert request.promo_id == 41
    assert request.payment_status == "partial"
    assert request.status == "pending"
    assert request.additional_attractions[0].price_at_booking == 5.0
    assert request.additional_addons[0].price_at_booking == 30.0
    assert request.total_amount == float(breakdown.total.quantize(Decimal("0.01")))


@pytest.mark.asyncio
async def test_card_is_charged_before_booking_is_created(party_package, booking_service, payment_gateway):
    use_case = _use_case(booking_service, payment_gateway, send_receipt_email=False)
    result = await use_case.execute(_state(), party_package, CARD)

    assert result.is_success
    assert result.booking.reference_number.startswith("BK20260310")
    # 100 base + 25 overage + 60 laser tag + 30 host
    assert result.amount_paid == 215.0
    assert payment_gateway.charges == [("1111", Decimal("215.00"))]
    assert payment_gateway.links == [(1, result.booking.id)]
    stored = booking_service.bookings[result.booking.id]
    assert stored.payment_status == "paid"
    assert stored.status == "confirmed"
    assert booking_service.receipts[result.booking.id].send_email is False


@pytest.mark.asyncio
async def test_declined_card_creates_nothing(party_package, booking_service):
    gateway = MockPaymentGateway(decline_message="Card declined")
    result = await _use_case(booking_service, gateway).execute(_state(), party_package, CARD)

    assert result.status == "failed"
    assert result.is_retryable
    assert result.error == "Card declined"
    assert booking_service.bookings == {}


@pytest.mark.asyncio
async def test_invalid_card_blocks_submission(party_package, booking_service, payment_gateway):
    bad_card = CardDetails(number="4111111111111112", month="12", year="2030", cvv="123")
    result = await _use_case(booking_service, payment_gateway).execute(_state(), party_package, bad_card)

    assert result.status == "invalid"
    assert result.error == "Please enter a valid card number"
    assert payment_gateway.charges == []


@pytest.mark.asyncio
async def test_missing_fields_are_reported(party_package, booking_service, payment_gateway):
    result = await _use_case(booking_service, payment_gateway).execute(
        _state(booking_time=None), party_package, CARD
    )

    assert result.status == "invalid"
    assert "time" in result.error


@pytest.mark.asyncio
async def test_pay_later_skips_payment(party_package, booking_service, payment_gateway):
    result = await _use_case(booking_service, payment_gateway).execute(
        _state(payment_method="pay_later"), party_package
    )

    assert result.is_success
    assert result.amount_paid == 0.0
    stored = booking_service.bookings[result.booking.id]
    assert stored.payment_status == "pending"
    assert stored.status == "pending"
    assert payment_gateway.charges == []
    assert payment_gateway.recorded == []


@pytest.mark.asyncio
async def test_in_store_partial_payment_is_recorded(party_package, booking_service, payment_gateway):
    result = await _use_case(booking_service, payment_gateway).execute(
        _state(payment_method="in-store", payment_split="partial"), party_package
    )

    assert result.amount_paid == 43.0
    assert payment_gateway.recorded == [(result.booking.id, Decimal("43.00"), "in-store")]
    assert booking_service.bookings[result.booking.id].payment_status == "partial"


@pytest.mark.asyncio
async def test_custom_amount_must_be_positive(party_package, booking_service, payment_gateway):
    result = await _use_case(booking_service, payment_gateway).execute(
        _state(payment_method="in-store", payment_split="custom"), party_package
    )

    assert result.status == "invalid"


@pytest.mark.asyncio
async def test_card_without_online_processing_is_recorded(party_package, booking_service, payment_gateway):
    use_case = _use_case(booking_service, payment_gateway, online_card_processing=False)
    result = await use_case.execute(_state(), party_package)

    assert result.is_success
    assert payment_gateway.charges == []
    assert payment_gateway.recorded[0][2] == "card"


@pytest.mark.asyncio
async def test_booking_service_failure_is_retryable(party_package, booking_service, payment_gateway):
    booking_service.fail_next = "Service unavailable"
    result = await _use_case(booking_service, payment_gateway).execute(
        _state(payment_method="pay_later"), party_package
    )

    assert result.status == "failed"
    assert result.is_retryable
    assert result.error == "Service unavailable"


@pytest.mark.asyncio
async def test_follow_up_failures_do_not_fail_the_booking(party_package, caplog):
    booking_service = MemoryBookingService(fail_receipts=True)
    gateway = MockPaymentGateway(link_failures=5)
    result = await _use_case(booking_service, gateway).execute(_state(), party_package, CARD)

    assert result.is_success
    assert gateway.links == []
    assert booking_service.receipts == {}
    assert "Payment left unlinked" in caplog.text


@pytest.mark.asyncio
async def test_link_payment_is_retried(party_package, booking_service):
    gateway = MockPaymentGateway(link_failures=2)
    result = await _use_case(booking_service, gateway).execute(_state(), party_package, CARD)

    assert gateway.links == [(1, result.booking.id)]
