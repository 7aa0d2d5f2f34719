"""
Infrastructure exceptions.
"""

from typing import Optional, Dict, Any
from .base import InfrastructureError


class RemoteEnvError(InfrastructureError):
    """
    Call to an environment admin service failed.

    Example:
        >>> raise RemoteEnvError(
        ...     env="DEV",
        ...     operation="create_app",
        ...     reason="Connection refused"
        ... )
    """

    def __init__(
        self,
        env: str,
        operation: str,
        reason: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            env: Environment name
            operation: Admin API operation (create_app, load_app, health)
            reason: Failure reason
            status_code: HTTP status returned by the admin service, if any
            details: Additional details
        """
        super().__init__(
            message=f"Admin service call '{operation}' failed in env {env}: {reason}",
            details={
                "env": env,
                "operation": operation,
                "reason": reason,
                "status_code": status_code,
                **(details or {})
            },
            error_code="REMOTE_ENV_ERROR"
        )
        self.env = env
        self.status_code = status_code
