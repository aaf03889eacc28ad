"""Custom exceptions for the koperasi client.

Messages are shown to members as-is, so they are written in Indonesian.
"""


class KoperasiError(Exception):
    """Base exception for all koperasi-related errors."""
    pass


class AccountNotFoundError(KoperasiError):
    """Raised when no active account matches a phone number or id."""
    pass


class InvalidPinError(KoperasiError):
    """Raised when a PIN does not match or has the wrong shape."""
    pass


class NotAuthenticatedError(KoperasiError):
    """Raised when a command needs a logged-in member."""
    pass


class InvalidAmountError(KoperasiError):
    """Raised when an invalid amount is provided (e.g., negative amount)."""
    pass


class InsufficientBalanceError(KoperasiError):
    """Raised when a savings account cannot cover a withdrawal."""
    pass


class TabunganNotFoundError(KoperasiError):
    """Raised when a savings account cannot be found."""
    pass


class PembiayaanNotFoundError(KoperasiError):
    """Raised when a loan cannot be found."""
    pass


class TransactionFailedError(KoperasiError):
    """Raised when a deposit, withdrawal or account opening fails remotely."""
    pass


class BackendError(KoperasiError):
    """Raised when the remote backend rejects or fails a query."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code
