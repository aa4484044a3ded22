"""Core exceptions for the Seaport marketplace core.

Every exception carries a ``status_code`` so the surrounding HTTP or CLI layer
can render ``{"error": str(exc)}`` with a conventional status.
"""


class SeaportMarketError(Exception):
    """Base exception for all marketplace errors."""

    status_code = 500


class InvalidStateTransitionError(SeaportMarketError):
    """Raised when an invalid action status transition is attempted."""

    pass


class ConfigurationError(SeaportMarketError):
    """Raised when configuration is invalid."""

    pass


class PreconditionError(SeaportMarketError):
    """Raised when an action precondition fails before any wallet call."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(SeaportMarketError):
    """Raised when a requested resource does not exist."""

    status_code = 404


class MarketplaceApiError(SeaportMarketError):
    """Raised when the marketplace REST API fails."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def is_transport_error(self) -> bool:
        """True when no HTTP response was received."""
        return self.status is None


class WalletError(SeaportMarketError):
    """Raised when a wallet interaction fails (rejection, signing, provider)."""

    pass


class WalletTimeoutError(WalletError):
    """Raised when a wallet request does not answer in time."""

    pass


class TransactionFailedError(WalletError):
    """Raised when a transaction cannot be built or broadcast."""

    pass
