"""
Base exceptions for the config portal.

Defines the exception hierarchy shared by all layers.
"""

from typing import Optional, Dict, Any


class PortalError(Exception):
    """
    Base exception for all portal errors.

    Attributes:
        message: Error message
        details: Additional error details
        error_code: Stable code identifying the error

    Example:
        >>> try:
        ...     raise PortalError("Something went wrong")
        ... except PortalError as e:
        ...     print(f"Error: {e}")
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the exception into a dict.

        Used for logging and API responses.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class DomainError(PortalError):
    """
    Base exception for business rule violations.

    Domain errors are caller-input failures: they are surfaced
    immediately and never retried.
    """
    pass


class InfrastructureError(PortalError):
    """
    Base exception for failures of external systems:
    database, remote admin services, network.
    """
    pass
