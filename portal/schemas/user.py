"""User schemas"""

from pydantic import BaseModel, ConfigDict, Field


class UserInfo(BaseModel):
    """Resolved identity of a portal user"""

    user_id: str = Field(..., validation_alias="username")
    name: str = Field("", validation_alias="display_name")
    email: str
    enabled: bool = Field(True, validation_alias="is_enabled")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
