from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BookingConfirmation:
    id: int
    reference_number: str
    customer_id: int | None = None


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    transaction_id: str | None = None
    payment_id: int | None = None
    message: str | None = None


@dataclass(frozen=True)
class ReceiptArtifact:
    reference_number: str
    send_email: bool = True


@dataclass(frozen=True)
class SubmissionResult:
    status: str  # "submitted", "invalid", "failed", "busy"
    booking: BookingConfirmation | None = None
    error: str | None = None
    amount_paid: float | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "submitted"

    @property
    def is_retryable(self) -> bool:
        return self.status in {"failed", "busy"}
