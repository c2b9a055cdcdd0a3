from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dms_api.models.enums import DocumentStatus, DocumentType, SecurityLevel, StorageType


class DocumentIn(BaseModel):
    """Caller-editable document fields.

    Storage locator and version counter are owned by the content workflow and
    are never taken from input.
    """

    document_id: str | None = None
    name: str = Field(min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=2000)
    file_name: str | None = None
    file_extension: str | None = None
    mime_type: str | None = None
    file_size: int | None = Field(default=None, ge=0)
    document_type: DocumentType | None = None
    document_status: DocumentStatus | None = None
    storage_type: StorageType | None = None
    security_level: SecurityLevel | None = None
    folder_id: str | None = None
    is_encrypted: bool = False
    expiration_date: datetime | None = None
    retention_date: datetime | None = None
    checksum: str | None = None
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_id: str
    name: str
    description: str | None = None
    file_name: str | None = None
    file_extension: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    document_type: DocumentType
    document_status: DocumentStatus
    storage_type: StorageType | None = None
    storage_path: str | None = None
    security_level: SecurityLevel
    folder_id: str | None = None
    is_encrypted: bool
    is_indexed: bool
    expiration_date: datetime | None = None
    retention_date: datetime | None = None
    checksum: str | None = None
    version: int
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None


class DocumentVersionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    version_id: str
    document_id: str
    version_number: int
    version_label: str | None = None
    file_name: str | None = None
    file_extension: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    storage_type: StorageType | None = None
    storage_path: str | None = None
    is_encrypted: bool
    change_summary: str | None = None
    is_major_version: bool
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
