"""
Cash drawer error taxonomy.

Every error is recoverable: it is raised at the transaction boundary after
rollback, so the drawer is exactly as it was before the call.
"""


class CashError(Exception):
    """Base class for cash ledger failures."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InvalidMovementError(CashError, ValueError):
    """Bad input: unknown direction, unknown denomination, or a bad quantity."""


class EmptyMovementError(CashError):
    """The movement would not change anything (empty or all-zero delta)."""


class InsufficientDenominationError(CashError):
    """A withdrawal would drive a denomination count below zero."""


class ReversalUnderflowError(CashError):
    """Deleting a deposit would drive a denomination count below zero."""


class MovementNotFoundError(CashError):
    """The referenced movement id does not exist."""


class MalformedStateError(CashError):
    """A persisted denomination map could not be decoded."""
