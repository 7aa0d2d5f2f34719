"""App schemas"""

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

APP_ID_PATTERN = r"^[0-9a-zA-Z_.-]+$"


class AppBase(BaseModel):
    """Base app schema"""

    app_id: str = Field(..., min_length=1, max_length=64, pattern=APP_ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=500)
    org_id: str = Field("", max_length=32)
    org_name: str = Field("", max_length=64)
    owner_name: str = Field(..., min_length=1, max_length=500)


class AppCreateRequest(AppBase):
    """Schema for creating an app, optionally with extra app admins"""

    admins: set[str] = Field(default_factory=set)


class AppUpdateRequest(BaseModel):
    """Schema for updating an app. The app id is taken from the path."""

    name: str = Field(..., min_length=1, max_length=500)
    org_id: str = Field("", max_length=32)
    org_name: str = Field("", max_length=64)
    owner_name: str = Field(..., min_length=1, max_length=500)


class AppImportRequest(BaseModel):
    """Schema for importing an app from an environment copy"""

    env: str = Field(..., min_length=1)
    app_id: str = Field(..., min_length=1, max_length=64, pattern=APP_ID_PATTERN)


class AppDTO(AppBase):
    """App record as exchanged with the lifecycle service"""

    owner_email: str = ""
    created_by: str = ""
    last_modified_by: str = ""
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Fields recorded in the audit trail
    AUDITED_FIELDS: ClassVar[tuple[str, ...]] = (
        "app_id", "name", "org_id", "org_name", "owner_name", "owner_email",
        "created_by", "last_modified_by",
    )

    model_config = ConfigDict(from_attributes=True)


class AppPayload(BaseModel):
    """App representation on the admin service wire"""

    app_id: str = Field(..., alias="appId")
    name: str
    org_id: str = Field("", alias="orgId")
    org_name: str = Field("", alias="orgName")
    owner_name: str = Field(..., alias="ownerName")
    owner_email: str = Field("", alias="ownerEmail")
    created_by: str = Field("", alias="dataChangeCreatedBy")
    last_modified_by: str = Field("", alias="dataChangeLastModifiedBy")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_app(cls, app: AppDTO) -> "AppPayload":
        return cls(
            app_id=app.app_id,
            name=app.name,
            org_id=app.org_id,
            org_name=app.org_name,
            owner_name=app.owner_name,
            owner_email=app.owner_email,
            created_by=app.created_by,
            last_modified_by=app.last_modified_by,
        )

    def to_app(self) -> AppDTO:
        return AppDTO(
            app_id=self.app_id,
            name=self.name,
            org_id=self.org_id,
            org_name=self.org_name,
            owner_name=self.owner_name,
            owner_email=self.owner_email,
            created_by=self.created_by,
            last_modified_by=self.last_modified_by,
        )


class AppPage(BaseModel):
    """Paginated app listing"""

    content: list[AppDTO]
    page: int
    size: int
    total: int
