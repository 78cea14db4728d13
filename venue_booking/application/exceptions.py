class BookingValidationError(ValueError):
    """Raised when a selection fails a required-field or card check."""
    pass


class UpstreamServiceError(RuntimeError):
    """Raised when a backend collaborator fails (timeouts, network errors, bad responses)."""
    pass


class SlotFeedError(UpstreamServiceError):
    """Raised when the live slot feed fails or closes with an error."""
    pass


class PaymentDeclinedError(RuntimeError):
    """Raised when the card processor declines or rejects a charge."""
    pass
