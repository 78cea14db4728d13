from __future__ import annotations

import logging
from decimal import Decimal
from itertools import count

from venue_booking.application.exceptions import UpstreamServiceError
from venue_booking.application.ports.payment_gateway import PaymentGatewayPort
from venue_booking.application.utils.card import validate_card_number
from venue_booking.domain.entities.booking import PaymentResult
from venue_booking.domain.entities.selection_state import CardDetails, CustomerInfo


class MockPaymentGateway(PaymentGatewayPort):
    """Approves any Luhn-valid card unless told to decline."""

    def __init__(self, decline_message: str | None = None, link_failures: int = 0) -> None:
        self._ids = count(1)
        self.decline_message = decline_message
        self.link_failures = link_failures
        self.charges: list[tuple[str, Decimal]] = []
        self.recorded: list[tuple[int, Decimal, str]] = []
        self.links: list[tuple[int, int]] = []
        self._logger = logging.getLogger(__name__)

    async def process_card_payment(
        self,
        card: CardDetails,
        amount: Decimal,
        customer: CustomerInfo | None = None,
    ) -> PaymentResult:
        if self.decline_message is not None:
            return PaymentResult(success=False, message=self.decline_message)
        if not validate_card_number(card.number):
            return PaymentResult(success=False, message="Invalid card number")

        payment_id = next(self._ids)
        self.charges.append((card.number[-4:], amount))
        self._logger.info("Mock card charged", extra={"reason": f"payment {payment_id}"})
        return PaymentResult(success=True, transaction_id=f"MOCK-{payment_id:06d}", payment_id=payment_id)

    async def record_payment(self, booking_id: int, amount: Decimal, method: str, note: str | None = None) -> None:
        self.recorded.append((booking_id, amount, method))

    async def link_payment(self, payment_id: int, booking_id: int) -> None:
        if self.link_failures > 0:
            self.link_failures -= 1
            raise UpstreamServiceError("Payment service unavailable")
        self.links.append((payment_id, booking_id))
