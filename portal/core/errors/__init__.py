"""
Portal exception hierarchy.
"""

from .base import (
    PortalError,
    DomainError,
    InfrastructureError,
)

from .domain_errors import (
    AppAlreadyExistsError,
    AppNotExistsError,
    OwnerNotFoundError,
)

from .infrastructure_errors import (
    RemoteEnvError,
)

__all__ = [
    "PortalError",
    "DomainError",
    "InfrastructureError",

    "AppAlreadyExistsError",
    "AppNotExistsError",
    "OwnerNotFoundError",

    "RemoteEnvError",
]
