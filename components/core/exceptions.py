"""Domain errors raised by repositories and services."""

from fastapi import status


class LedgerError(Exception):
    """Base class for every error the ledger core raises on purpose."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(LedgerError):
    """No owner id could be resolved for the request."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(LedgerError):
    """Referenced entity does not exist or belongs to another owner."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(LedgerError):
    """Input was rejected before any write."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(LedgerError):
    """A uniqueness rule was violated."""

    status_code = status.HTTP_409_CONFLICT


class InvariantViolationError(LedgerError):
    """Stored state disagrees with the ledger. Never auto-corrected."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
