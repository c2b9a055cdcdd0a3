from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TagIn(BaseModel):
    tag_id: str | None = None
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    is_system_tag: bool = False
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tag_id: str
    name: str
    description: str | None = None
    color: str | None = None
    is_system_tag: bool
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None


class DocumentTagIn(BaseModel):
    document_tag_id: str | None = None
    document_id: str
    tag_id: str
    tenant_id: str | None = None
    created_by: str | None = None


class DocumentTagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_tag_id: str
    document_id: str
    tag_id: str
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
