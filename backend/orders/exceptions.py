"""
Exceptions raised while validating, building and submitting kiosk orders.

Every one of these resolves to a retryable, user-visible state; none of them
should take the kiosk down.
"""


class OrderSubmissionError(Exception):
    """Base exception for order submission failures."""

    def __init__(self, message, details=None):
        self.message = message
        self.details = details
        super().__init__(message)


class OrderValidationError(OrderSubmissionError):
    """
    Raised when a checkout is missing required data.

    Always raised before any network call is made.
    """

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class OrderTotalMismatchError(OrderValidationError):
    """Raised when the cart's running total disagrees with the normalized line items."""

    def __init__(self, expected_minor, actual_minor, currency):
        self.expected_minor = expected_minor
        self.actual_minor = actual_minor
        self.currency = currency
        super().__init__(
            f"Order total mismatch: cart says {expected_minor}, "
            f"line items sum to {actual_minor} ({currency} minor units)"
        )


class BackendUnavailableError(OrderSubmissionError):
    """Raised when the order backend cannot be reached (connection error or timeout)."""
    pass


class OrderRejectedError(OrderSubmissionError):
    """Raised when the order backend answers with a non-2xx status."""

    def __init__(self, message, details=None, status_code=None):
        self.status_code = status_code
        super().__init__(message, details)
