from __future__ import annotations

import logging
from itertools import count

from venue_booking.application.dto.booking_request import BookingRequestDTO
from venue_booking.application.exceptions import UpstreamServiceError
from venue_booking.application.ports.booking_service import BookingServicePort
from venue_booking.domain.entities.booking import BookingConfirmation, ReceiptArtifact


class MemoryBookingService(BookingServicePort):
    def __init__(self, fail_receipts: bool = False) -> None:
        self._ids = count(1)
        self._fail_receipts = fail_receipts
        self.bookings: dict[int, BookingRequestDTO] = {}
        self.receipts: dict[int, ReceiptArtifact] = {}
        self.fail_next: str | None = None
        self._logger = logging.getLogger(__name__)

    async def create_booking(self, request: BookingRequestDTO) -> BookingConfirmation:
        if self.fail_next is not None:
            message, self.fail_next = self.fail_next, None
            raise UpstreamServiceError(message)

        booking_id = next(self._ids)
        self.bookings[booking_id] = request
        reference = f"BK{request.booking_date:%Y%m%d}{booking_id:04d}"
        self._logger.info("Booking stored", extra={"booking_id": booking_id, "reference_number": reference})
        return BookingConfirmation(id=booking_id, reference_number=reference)

    async def store_receipt_artifact(self, booking_id: int, artifact: ReceiptArtifact) -> None:
        if self._fail_receipts:
            raise UpstreamServiceError("Receipt storage unavailable")
        self.receipts[booking_id] = artifact
