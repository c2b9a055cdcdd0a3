from datetime import datetime

from pydantic import BaseModel, ConfigDict

from dms_api.models.enums import PermissionType


class PermissionIn(BaseModel):
    permission_id: str | None = None
    document_id: str
    party_id: str
    permission_type: PermissionType
    is_granted: bool = True
    expiration_date: datetime | None = None
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    permission_id: str
    document_id: str
    party_id: str
    permission_type: PermissionType
    is_granted: bool
    expiration_date: datetime | None = None
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None


class PermissionCheckOut(BaseModel):
    document_id: str
    party_id: str
    permission_type: PermissionType
    has_permission: bool
