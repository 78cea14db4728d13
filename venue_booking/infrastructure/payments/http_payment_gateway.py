from __future__ import annotations

import logging
from decimal import Decimal

import httpx

from venue_booking.application.exceptions import UpstreamServiceError
from venue_booking.application.ports.payment_gateway import PaymentGatewayPort
from venue_booking.core.config import settings
from venue_booking.domain.entities.booking import PaymentResult
from venue_booking.domain.entities.price_breakdown import round_money
from venue_booking.domain.entities.selection_state import CardDetails, CustomerInfo
from venue_booking.infrastructure.catalog.http_catalog import unwrap


class HttpPaymentGateway(PaymentGatewayPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        location_id: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self._api_token = api_token if api_token is not None else settings.API_TOKEN
        self._location_id = location_id or settings.LOCATION_ID
        self._client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    async def process_card_payment(
        self,
        card: CardDetails,
        amount: Decimal,
        customer: CustomerInfo | None = None,
    ) -> PaymentResult:
        payload: dict[str, object] = {
            "location_id": self._location_id,
            "amount": float(round_money(amount)),
            "card_number": card.number,
            "expiration_date": f"{card.month}/{card.year}",
            "cvv": card.cvv,
        }
        if customer is not None:
            payload["customer"] = {
                "first_name": customer.first_name,
                "last_name": customer.last_name,
                "email": customer.email,
                "phone": customer.phone,
            }
        try:
            response = await self._client.post(f"{self._base_url}/payments/charge", json=payload, headers=self._headers())
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Card charge request failed", extra={"error": str(e)})
            raise UpstreamServiceError("Payment service unavailable. Please try again.") from e

        if response.is_error or not body.get("success", False):
            message = body.get("message") or "Payment failed. Please try again."
            self._logger.warning("Card charge declined", extra={"reason": message})
            return PaymentResult(success=False, message=message)

        data = unwrap(body) or {}
        return PaymentResult(
            success=True,
            transaction_id=body.get("transaction_id") or data.get("transaction_id"),
            payment_id=data.get("payment_id") or data.get("id"),
            message=body.get("message"),
        )

    async def record_payment(self, booking_id: int, amount: Decimal, method: str, note: str | None = None) -> None:
        payload = {
            "payable_id": booking_id,
            "payable_type": "booking",
            "location_id": self._location_id,
            "amount": float(round_money(amount)),
            "method": "cash" if method == "in-store" else method,
            "status": "completed",
            "notes": note,
        }
        try:
            response = await self._client.post(f"{self._base_url}/payments", json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"Failed to record payment for booking {booking_id}") from e

    async def link_payment(self, payment_id: int, booking_id: int) -> None:
        try:
            response = await self._client.patch(
                f"{self._base_url}/payments/{payment_id}/payable",
                json={"payable_id": booking_id, "payable_type": "booking"},
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"Failed to link payment {payment_id}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
