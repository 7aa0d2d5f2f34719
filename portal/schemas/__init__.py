"""Pydantic schemas"""

from portal.schemas.app import (
    AppBase,
    AppCreateRequest,
    AppDTO,
    AppImportRequest,
    AppPage,
    AppPayload,
    AppUpdateRequest,
)
from portal.schemas.provisioning import EnvProvisionResult, ProvisioningReport
from portal.schemas.user import UserInfo

__all__ = [
    "AppBase",
    "AppCreateRequest",
    "AppDTO",
    "AppImportRequest",
    "AppPage",
    "AppPayload",
    "AppUpdateRequest",
    "EnvProvisionResult",
    "ProvisioningReport",
    "UserInfo",
]
