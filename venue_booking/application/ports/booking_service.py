from __future__ import annotations

from abc import ABC, abstractmethod

from venue_booking.application.dto.booking_request import BookingRequestDTO
from venue_booking.domain.entities.booking import BookingConfirmation, ReceiptArtifact


class BookingServicePort(ABC):
    @abstractmethod
    async def create_booking(self, request: BookingRequestDTO) -> BookingConfirmation:
        """Persist a fully priced booking. Raises UpstreamServiceError on failure."""
        raise NotImplementedError

    @abstractmethod
    async def store_receipt_artifact(self, booking_id: int, artifact: ReceiptArtifact) -> None:
        """Attach the receipt artifact (QR payload) to a booking."""
        raise NotImplementedError
