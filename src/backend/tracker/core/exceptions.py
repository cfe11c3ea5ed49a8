"""
Custom exception classes for the application.

Provides structured error handling with consistent error codes.
Startup failures are split into fatal ones (BootstrapException subclasses)
and soft ones the bootstrap recovers from (GeoResolverException).
"""

from typing import Any


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        status_code: HTTP status code to return
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str = "APP_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# Bootstrap Exceptions
class BootstrapException(AppException):
    """Base exception for failures that stop the process from starting."""

    def __init__(
        self,
        message: str = "Bootstrap failed",
        error_code: str = "BOOTSTRAP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, 500, details)


class LoggingInitException(BootstrapException):
    """Raised when the process logger cannot be set up."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(
            message,
            "LOGGING_INIT_ERROR",
            {"path": path} if path else None,
        )


class ResourceProvisioningException(BootstrapException):
    """Raised when a per-token output resource cannot be created."""

    def __init__(self, resource_name: str, reason: str) -> None:
        super().__init__(
            f"Failed to create resource '{resource_name}': {reason}",
            "RESOURCE_PROVISIONING_ERROR",
            {"resource": resource_name},
        )
        self.resource_name = resource_name


# Soft failures
class GeoResolverException(AppException):
    """Raised when the geo database cannot be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Unable to open geo database at '{path}': {reason}",
            "GEO_RESOLVER_ERROR",
            503,
            {"path": path},
        )
        self.path = path


class ResourceCloseException(AppException):
    """Raised by composite resources when some underlying releases failed."""

    def __init__(self, failures: dict[str, str]) -> None:
        super().__init__(
            f"Failed to close {len(failures)} resource(s)",
            "RESOURCE_CLOSE_ERROR",
            500,
            {"failures": failures},
        )
        self.failures = failures
