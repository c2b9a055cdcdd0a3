from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignatureProviderIn(BaseModel):
    provider_id: str | None = None
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    provider_code: str | None = Field(default=None, max_length=100)
    is_active: bool = True
    is_default: bool = False
    tenant_id: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class SignatureProviderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider_id: str
    name: str
    description: str | None = None
    provider_code: str | None = None
    is_active: bool
    is_default: bool
    tenant_id: str | None = None
    created_at: datetime
    created_by: str | None = None
    updated_at: datetime
    updated_by: str | None = None
