# database/errors.py
"""
Domain-level errors the ledger surfaces to its caller.

ValidationError, NotFoundError and StoreError are raised to the caller and all
carry a `user_message` a screen can show as-is. NonCriticalWarning is never
raised out of the ledger: it records a follow-up step (inventory or payment
update) that failed after the primary write was already committed.
"""

from __future__ import annotations

RETRY_MESSAGE = "Something went wrong. Please try again."


class LedgerError(Exception):
    """Base class for every error the ledger reports."""

    user_message = RETRY_MESSAGE


class ValidationError(LedgerError, ValueError):
    """Bad caller input (non-positive quantity/rate, empty vendor, ...)."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
        self.user_message = f"{message} Please correct it and try again."


class NotFoundError(LedgerError, LookupError):
    """Delete/lookup target is absent."""


class StoreError(LedgerError):
    """Underlying persistence failure (open, migrate, query, primary write)."""


class NonCriticalWarning(LedgerError):
    """A side-effect step failed after the primary write succeeded."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"{step} failed: {cause}")
        self.step = step
        self.cause = cause
