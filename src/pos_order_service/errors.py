"""Error taxonomy for the point-of-sale order service.

Recoverable errors (validation and persistence) are caught at the boundary
of the user action that triggered them and turned into a notification.
Configuration errors are fatal and stop the application from starting.
"""


class PosOrderError(Exception):
    """Base class for all order service errors."""


class ValidationError(PosOrderError):
    """Raised when an order fails validation before any network call."""


class PersistenceError(PosOrderError):
    """Raised when the hosted database rejects or fails a request.

    Attributes:
        operation: The persistence operation that failed (insert, select, update, delete)
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class ConfigurationError(PosOrderError):
    """Raised at startup when required configuration is missing or invalid."""
