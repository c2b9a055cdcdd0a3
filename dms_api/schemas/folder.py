from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dms_api.models.enums import SecurityLevel


class FolderIn(BaseModel):
    folder_id: str | None = None
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    parent_folder_id: str | None = None
    path: str | None = None
    security_level: SecurityLevel | None = None
    is_system_folder: bool = False
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class FolderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    folder_id: str
    name: str
    description: str | None = None
    parent_folder_id: str | None = None
    path: str | None = None
    security_level: SecurityLevel | None = None
    is_system_folder: bool
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None
