"""Contracts of the external content-management capabilities.

Each capability is optional. A deployment registers the ones it provides in
the :class:`~dms_api.core.capabilities.CapabilityRegistry`; services look
them up per call and decide whether a missing or failing capability is
fatal or tolerated.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable


class EcmDocumentStatus(str, Enum):
    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ARCHIVED = "ARCHIVED"
    LOCKED = "LOCKED"
    EXPIRED = "EXPIRED"
    DELETED = "DELETED"


class EcmSignatureRequestStatus(str, Enum):
    CREATED = "CREATED"
    SENT = "SENT"
    VIEWED = "VIEWED"
    SIGNED = "SIGNED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"
    VOIDED = "VOIDED"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


class ResourceType(str, Enum):
    DOCUMENT = "DOCUMENT"
    FOLDER = "FOLDER"


class PrincipalType(str, Enum):
    USER = "USER"
    GROUP = "GROUP"


@dataclass
class EcmDocument:
    id: str
    name: str | None
    description: str | None = None
    mime_type: str | None = None
    extension: str | None = None
    size: int | None = None
    storage_path: str | None = None
    checksum: str | None = None
    version: int | None = None
    status: EcmDocumentStatus = EcmDocumentStatus.ACTIVE
    folder_id: str | None = None
    tenant_id: str | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None
    expires_at: datetime | None = None
    encrypted: bool | None = None


@dataclass
class EcmDocumentVersion:
    id: str
    document_id: str
    version_number: int
    version_label: str
    comment: str
    size: int
    mime_type: str
    created_at: datetime
    current: bool = True
    major_version: bool = False
    status: str = "CURRENT"
    version_type: str = "MANUAL"
    changes_summary: str | None = None
    storage_path: str | None = None


@dataclass
class EcmSignatureRequest:
    id: str
    envelope_id: str
    signer_email: str | None
    signer_name: str | None
    signer_role: str
    signing_order: int
    required: bool
    custom_message: str
    language: str
    time_zone: str
    authentication_method: str
    expires_at: datetime
    created_at: datetime
    status: EcmSignatureRequestStatus = EcmSignatureRequestStatus.CREATED
    request_type: str = "SIGNATURE"


@dataclass
class EcmSignatureRequestResult:
    """What a provider hands back after creating a signature request."""

    external_id: str
    signing_url: str | None = None


@dataclass
class EcmPermission:
    id: str
    resource_id: str
    principal_id: str
    permission_type: str
    granted: bool
    resource_type: ResourceType = ResourceType.DOCUMENT
    principal_type: PrincipalType = PrincipalType.USER
    granted_at: datetime | None = None
    expires_at: datetime | None = None
    inherited: bool = False
    extra: dict = field(default_factory=dict)


@runtime_checkable
class ContentPort(Protocol):
    async def store_content(self, content_id: str, payload: bytes, mime_type: str) -> str:
        """Store bytes and return the storage locator."""

    def get_content_stream(self, content_id: str) -> AsyncIterator[bytes]:
        """Stream stored bytes back in chunks."""

    async def delete_content(self, content_id: str) -> None: ...


@runtime_checkable
class VersionPort(Protocol):
    async def create_version(self, version: EcmDocumentVersion, payload: bytes) -> EcmDocumentVersion:
        """Create a version with its content and return it with its storage locator."""

    async def delete_version(self, version_id: str) -> None: ...


@runtime_checkable
class SearchPort(Protocol):
    async def index_document(self, document: EcmDocument) -> None: ...

    async def remove_from_index(self, document_id: str) -> None: ...


@runtime_checkable
class SignatureRequestPort(Protocol):
    async def create_signature_request(self, request: EcmSignatureRequest) -> EcmSignatureRequestResult: ...

    async def resend_notification(self, request_id: str) -> None: ...

    async def delete_signature_request(self, request_id: str) -> None: ...


@runtime_checkable
class PermissionPort(Protocol):
    async def grant_permission(self, permission: EcmPermission) -> None: ...

    async def update_permission(self, permission: EcmPermission) -> None: ...

    async def revoke_permission(self, permission_id: str) -> None: ...

    async def has_permission(
        self,
        resource_id: str,
        resource_type: ResourceType,
        principal_id: str,
        principal_type: PrincipalType,
        permission_type: str,
    ) -> bool: ...
