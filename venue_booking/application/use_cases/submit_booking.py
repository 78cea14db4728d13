from __future__ import annotations

import logging
from decimal import Decimal

from venue_booking.application.dto.booking_request import AddOnLineDTO, AttractionLineDTO, BookingRequestDTO
from venue_booking.application.exceptions import PaymentDeclinedError, UpstreamServiceError
from venue_booking.application.ports.booking_service import BookingServicePort
from venue_booking.application.ports.payment_gateway import PaymentGatewayPort
from venue_booking.application.utils.pricing import amount_due_now, calculate_price, payment_status
from venue_booking.application.utils.wizard_guards import card_details_error, missing_fields
from venue_booking.domain.entities.booking import (
    BookingConfirmation,
    PaymentResult,
    ReceiptArtifact,
    SubmissionResult,
)
from venue_booking.domain.entities.package import Package
from venue_booking.domain.entities.price_breakdown import PriceBreakdown, round_money
from venue_booking.domain.entities.selection_state import CardDetails, SelectionState

_DURATION_UNITS = {"minutes", "hours", "hours and minutes"}


def build_booking_request(
    state: SelectionState,
    package: Package,
    breakdown: PriceBreakdown,
    amount_paid: Decimal,
    location_id: int,
) -> BookingRequestDTO:
    status = payment_status(amount_paid, breakdown.total)
    promo = package.find_promo(state.promo_code)
    gift_card = package.find_gift_card(state.gift_card_code)

    if package.duration.unit in _DURATION_UNITS:
        duration, duration_unit = float(package.duration.value), package.duration.unit
    else:
        duration, duration_unit = float(package.duration.minutes), "minutes"

    return BookingRequestDTO(
        guest_name=state.customer.full_name,
        guest_email=state.customer.email.strip(),
        guest_phone=state.customer.phone.strip(),
        location_id=location_id,
        package_id=package.id,
        room_id=state.room_id,
        booking_date=state.booking_date,
        booking_time=f"{state.booking_time:%H:%M}",
        participants=state.participants,
        duration=duration,
        duration_unit=duration_unit,
        total_amount=float(round_money(breakdown.total)),
        amount_paid=float(round_money(amount_paid)),
        payment_method=state.payment_method,
        payment_status=status,
        status="confirmed" if status == "paid" else "pending",
        promo_id=promo.id if promo and promo.is_active else None,
        gift_card_id=gift_card.id if gift_card and gift_card.is_active else None,
        notes=state.notes.strip() or None,
        additional_attractions=[
            AttractionLineDTO(
                attraction_id=line.item_id,
                quantity=line.quantity,
                price_at_booking=float(round_money(line.unit_price)),
            )
            for line in breakdown.attraction_lines
        ],
        additional_addons=[
            AddOnLineDTO(
                addon_id=line.item_id,
                quantity=line.quantity,
                price_at_booking=float(round_money(line.unit_price)),
            )
            for line in breakdown.add_on_lines
        ],
    )


class SubmitBookingUseCase:
    """
    Turns a completed selection into a booking.

    Card payments are charged before the booking is created, so a declined card
    never leaves a booking behind. Everything after creation (payment linking,
    payment records, the receipt artifact) is best effort.
    """

    LINK_ATTEMPTS = 3

    def __init__(
        self,
        booking_service: BookingServicePort,
        payment_gateway: PaymentGatewayPort,
        location_id: int,
        send_receipt_email: bool = True,
        online_card_processing: bool = True,
    ) -> None:
        self._booking_service = booking_service
        self._payment_gateway = payment_gateway
        self._location_id = location_id
        self._send_receipt_email = send_receipt_email
        self._online_card_processing = online_card_processing
        self._logger = logging.getLogger(__name__)

    def charges_card(self, state: SelectionState) -> bool:
        return state.payment_method == "card" and self._online_card_processing

    async def execute(
        self,
        state: SelectionState,
        package: Package,
        card: CardDetails | None = None,
    ) -> SubmissionResult:
        missing = missing_fields(state, package)
        if missing:
            return SubmissionResult(status="invalid", error=f"Missing required fields: {', '.join(missing)}")
        if (
            state.payment_method != "pay_later"
            and state.payment_split == "custom"
            and state.custom_amount <= 0
        ):
            return SubmissionResult(status="invalid", error="Custom amount must be greater than zero")

        breakdown = calculate_price(
            package,
            state.participants,
            attractions=state.attractions,
            add_ons=state.add_ons,
            promo_code=state.promo_code,
            gift_card_code=state.gift_card_code,
        )
        amount = round_money(
            amount_due_now(breakdown, state.payment_method, state.payment_split, state.custom_amount)
        )

        charge_card = self.charges_card(state) and amount > 0
        if charge_card:
            card = card or CardDetails()
            error = card_details_error(card)
            if error:
                return SubmissionResult(status="invalid", error=error)

        payment: PaymentResult | None = None
        try:
            if charge_card:
                payment = await self._charge(card, amount, state)
            request = build_booking_request(state, package, breakdown, amount, self._location_id)
            booking = await self._booking_service.create_booking(request)
        except PaymentDeclinedError as e:
            self._logger.warning("Card payment declined", extra={"package_id": package.id, "error": str(e)})
            return SubmissionResult(status="failed", error=str(e))
        except UpstreamServiceError as e:
            self._logger.error(
                "Booking creation failed",
                extra={
                    "package_id": package.id,
                    "error": str(e),
                    "reason": f"charged transaction {payment.transaction_id}" if payment else None,
                },
            )
            return SubmissionResult(status="failed", error=str(e))

        self._logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "reference_number": booking.reference_number},
        )

        if payment is not None:
            await self._link_payment(payment, booking)
        elif amount > 0:
            await self._record_payment(booking, amount, state.payment_method)

        await self._store_receipt(booking)
        return SubmissionResult(status="submitted", booking=booking, amount_paid=float(amount))

    async def _charge(self, card: CardDetails, amount: Decimal, state: SelectionState) -> PaymentResult:
        result = await self._payment_gateway.process_card_payment(card, amount, state.customer)
        if not result.success:
            raise PaymentDeclinedError(result.message or "Payment failed. Please try again.")
        return result

    async def _link_payment(self, payment: PaymentResult, booking: BookingConfirmation) -> None:
        if payment.payment_id is None:
            return
        for attempt in range(1, self.LINK_ATTEMPTS + 1):
            try:
                await self._payment_gateway.link_payment(payment.payment_id, booking.id)
                return
            except UpstreamServiceError as e:
                self._logger.warning(
                    "Linking payment to booking failed",
                    extra={"booking_id": booking.id, "error": str(e), "reason": f"attempt {attempt}"},
                )
        self._logger.error(
            "Payment left unlinked",
            extra={"booking_id": booking.id, "reason": f"payment {payment.payment_id}"},
        )

    async def _record_payment(self, booking: BookingConfirmation, amount: Decimal, method: str) -> None:
        try:
            await self._payment_gateway.record_payment(
                booking.id,
                amount,
                method,
                note=f"Payment for booking {booking.reference_number}",
            )
        except UpstreamServiceError as e:
            self._logger.warning("Recording payment failed", extra={"booking_id": booking.id, "error": str(e)})

    async def _store_receipt(self, booking: BookingConfirmation) -> None:
        artifact = ReceiptArtifact(reference_number=booking.reference_number, send_email=self._send_receipt_email)
        try:
            await self._booking_service.store_receipt_artifact(booking.id, artifact)
        except UpstreamServiceError as e:
            self._logger.warning("Storing receipt failed", extra={"booking_id": booking.id, "error": str(e)})
