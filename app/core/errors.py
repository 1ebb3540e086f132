"""Exception taxonomy shared by the store, the HTTP service and the client."""


class FinanceError(Exception):
    """Base class for all Finance Tracker errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        """Store the human readable message."""
        super().__init__(message)
        self.message = message


class ValidationError(FinanceError):
    """Missing or invalid transaction fields; the caller must correct the input."""

    status_code = 400


class NotFoundError(FinanceError):
    """The transaction id does not resolve to a stored record."""

    status_code = 404

    def __init__(self, message: str = "Not found") -> None:
        """Default to the message returned by the API."""
        super().__init__(message)


class TransportError(FinanceError):
    """The service or the store could not be reached; the caller may retry."""

    status_code = 503


class RateLimitError(FinanceError):
    """The client has used up its request budget for the current window."""

    status_code = 429
