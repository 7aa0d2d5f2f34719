"""
FastAPI dependency injection providers.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from portal.core.container import PortalContainer, get_container
from portal.services.app_service import AppService

OPERATOR_HEADER = "X-Portal-User"


def get_portal_container() -> PortalContainer:
    """Get the process wide container"""
    return get_container()


def get_app_service(container: PortalContainer = Depends(get_portal_container)) -> AppService:
    """Get the lifecycle service"""
    return container.app_service


def get_operator(x_portal_user: str | None = Header(default=None, alias=OPERATOR_HEADER)) -> str:
    """
    User performing the request.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if not x_portal_user or not x_portal_user.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {OPERATOR_HEADER} header",
        )
    return x_portal_user.strip()


# Type aliases for dependency injection
AppServiceDep = Annotated[AppService, Depends(get_app_service)]
Operator = Annotated[str, Depends(get_operator)]
