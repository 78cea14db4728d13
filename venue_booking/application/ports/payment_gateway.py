from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from venue_booking.domain.entities.booking import PaymentResult
from venue_booking.domain.entities.selection_state import CardDetails, CustomerInfo


class PaymentGatewayPort(ABC):
    @abstractmethod
    async def process_card_payment(
        self,
        card: CardDetails,
        amount: Decimal,
        customer: CustomerInfo | None = None,
    ) -> PaymentResult:
        """Charge a card. A declined charge returns success=False, it does not raise."""
        raise NotImplementedError

    @abstractmethod
    async def record_payment(self, booking_id: int, amount: Decimal, method: str, note: str | None = None) -> None:
        """Record a non-card payment (cash, in-store) against a booking."""
        raise NotImplementedError

    @abstractmethod
    async def link_payment(self, payment_id: int, booking_id: int) -> None:
        """Attach an earlier card charge to the booking it paid for."""
        raise NotImplementedError
