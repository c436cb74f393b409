"""
Domain-specific exceptions for ledger app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
Authorization failures reuse ``apps.cards.services.AuthorizationError``.
"""


class LedgerServiceError(Exception):
    """Base exception for all ledger service errors."""
    pass


class LedgerValidationError(LedgerServiceError):
    """Raised when transaction or split input is malformed."""
    pass


class StoreError(LedgerServiceError):
    """Raised when the backing store rejects a read or write."""
    pass


class TransactionNotFoundError(LedgerServiceError):
    """Raised when a transaction does not exist on the card."""
    pass


class GuestNotFoundError(LedgerServiceError):
    """Raised when a guest id is not in the device-local guest list."""
    pass


class PartialExpansionWarning(LedgerServiceError):
    """
    Carried (not raised) by a split whose leaves were only partly stored.

    The leaves that were stored stay stored; ``failed_names`` lists the
    participants whose leaf could not be written.
    """

    def __init__(self, failed_names):
        self.failed_names = list(failed_names)
        super().__init__(
            "Common expense was only partly saved. Missing entries for: "
            + ", ".join(self.failed_names)
        )
