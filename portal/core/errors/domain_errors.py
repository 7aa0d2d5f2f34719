"""
Domain exceptions.

Validation failures of application lifecycle operations.
"""

from typing import Optional, Dict, Any
from .base import DomainError


class AppAlreadyExistsError(DomainError):
    """
    A live application with the same app id already exists.

    Example:
        >>> raise AppAlreadyExistsError("pay-core")
    """

    def __init__(self, app_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"App already exists. AppId = {app_id}",
            details={"app_id": app_id, **(details or {})},
            error_code="APP_ALREADY_EXISTS"
        )


class AppNotExistsError(DomainError):
    """
    No live application with the given app id.

    Example:
        >>> raise AppNotExistsError("pay-core")
    """

    def __init__(self, app_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"App not exists. AppId = {app_id}",
            details={"app_id": app_id, **(details or {})},
            error_code="APP_NOT_EXISTS"
        )


class OwnerNotFoundError(DomainError):
    """
    The application owner does not resolve to a known user.

    Example:
        >>> raise OwnerNotFoundError("alice")
    """

    def __init__(self, owner_name: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"App's owner not exists. owner = {owner_name}",
            details={"owner_name": owner_name, **(details or {})},
            error_code="OWNER_NOT_FOUND"
        )
