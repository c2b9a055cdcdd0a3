from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentMetadataIn(BaseModel):
    metadata_id: str | None = None
    document_id: str
    key: str = Field(min_length=1, max_length=200)
    value: str | None = None
    value_type: str | None = Field(default=None, max_length=50)
    is_searchable: bool = False
    is_system_metadata: bool = False
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class DocumentMetadataOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metadata_id: str
    document_id: str
    key: str
    value: str | None = None
    value_type: str | None = None
    is_searchable: bool
    is_system_metadata: bool
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None
