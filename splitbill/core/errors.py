"""
Error taxonomy shared by services and routes.

Every error maps to one HTTP status code. Route handlers raise these and the
exception handlers registered in ``splitbill.main`` turn them into the
``{success, error}`` envelope.
"""
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from splitbill.services.split_validation import Violation


class SplitAppError(Exception):
    """Base class for errors reported to API callers."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InputError(SplitAppError):
    """Missing or invalid request fields (user-correctable)."""
    status_code = 400
    default_message = "Invalid request"


class ValidationFailed(InputError):
    """Split bill input failed validation; carries every violation found."""

    def __init__(self, violations: List["Violation"]):
        self.violations = list(violations)
        super().__init__(", ".join(v.message for v in self.violations))


class NotFoundError(SplitAppError):
    """Requested resource does not exist."""
    status_code = 404
    default_message = "Resource not found"


class InternalError(SplitAppError):
    """Unexpected failure while processing a request."""
    status_code = 500


class StorageError(InternalError):
    """Persistence layer failed to read or write a record."""
    default_message = "Storage operation failed"
