# ============================================================================
# CLAUDE CONTEXT - FEATURES API EXCEPTIONS
# ============================================================================
# STATUS: Standalone Module - Error taxonomy for the Features API
# PURPOSE: Exceptions mapped to HTTP status codes by the trigger layer
# EXPORTS: FeaturesAPIError, DatabaseUnavailableError, QueryFailedError
# DEPENDENCIES: none
# ============================================================================

"""
Features API Exceptions

    DatabaseUnavailableError -> 503, never retried
    QueryFailedError         -> 500, raised once retries are exhausted

Malformed query parameters are not errors: they are coerced to defaults
by BatchQueryParameters.
"""

from typing import Optional


class FeaturesAPIError(Exception):
    """Base class for Features API errors."""


class DatabaseUnavailableError(FeaturesAPIError):
    """The document store connection is not ready."""

    def __init__(self, message: str = "Database not connected"):
        super().__init__(message)


class QueryFailedError(FeaturesAPIError):
    """
    A store query kept failing after every allowed attempt.

    Attributes:
        operation: Name of the failed operation ("count", "batch", "collection")
        attempts: Number of attempts made
        cause: Last underlying exception
    """

    def __init__(self, operation: str, attempts: int, cause: Optional[BaseException] = None):
        self.operation = operation
        self.attempts = attempts
        self.cause = cause
        message = str(cause) if cause is not None else f"{operation} failed"
        super().__init__(message)
