from __future__ import annotations

import logging

import httpx

from venue_booking.application.dto.booking_request import BookingRequestDTO
from venue_booking.application.exceptions import UpstreamServiceError
from venue_booking.application.ports.booking_service import BookingServicePort
from venue_booking.core.config import settings
from venue_booking.domain.entities.booking import BookingConfirmation, ReceiptArtifact
from venue_booking.infrastructure.catalog.http_catalog import unwrap


class HttpBookingService(BookingServicePort):
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CATALOG_BASE_URL).rstrip("/")
        self._api_token = api_token if api_token is not None else settings.API_TOKEN
        self._client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    async def create_booking(self, request: BookingRequestDTO) -> BookingConfirmation:
        try:
            response = await self._client.post(
                f"{self._base_url}/bookings",
                json=request.model_dump(mode="json"),
                headers=self._headers(),
            )
            response.raise_for_status()
            data = unwrap(response.json())
            booking = BookingConfirmation(
                id=int(data["id"]),
                reference_number=str(data["reference_number"]),
                customer_id=data.get("customer_id"),
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            self._logger.error("Error creating booking", extra={"package_id": request.package_id, "error": str(e)})
            raise UpstreamServiceError("Failed to create booking. Please try again.") from e

        return booking

    async def store_receipt_artifact(self, booking_id: int, artifact: ReceiptArtifact) -> None:
        try:
            response = await self._client.post(
                f"{self._base_url}/bookings/{booking_id}/qrcode",
                json={"reference_number": artifact.reference_number, "send_email": artifact.send_email},
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"Failed to store receipt for booking {booking_id}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
