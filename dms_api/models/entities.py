from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from dms_api.models.enums import (
    DocumentStatus,
    DocumentType,
    PermissionType,
    SecurityLevel,
    SignatureFormat,
    SignatureStatus,
    SignatureType,
    StorageType,
    VerificationStatus,
)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as returned by some drivers) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def new_id() -> str:
    return str(uuid4())


class UtcDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC.

    Offsets are converted before binding, so drivers that drop the offset
    (SQLite) still store and compare the right instant.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value).astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


def _enum(enum_cls) -> Enum:
    return Enum(enum_cls, native_enum=False, length=40, validate_strings=True)


class Base(DeclarativeBase):
    pass


class Folder(Base):
    __tablename__ = "folders"

    folder_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    parent_folder_id: Mapped[str | None] = mapped_column(ForeignKey("folders.folder_id", ondelete="SET NULL"), nullable=True, index=True)
    path: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    security_level: Mapped[SecurityLevel | None] = mapped_column(_enum(SecurityLevel), nullable=True)
    is_system_folder: Mapped[bool] = mapped_column(Boolean, default=False)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class Document(Base):
    __tablename__ = "documents"

    document_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    file_extension: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(200), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    document_type: Mapped[DocumentType] = mapped_column(_enum(DocumentType), default=DocumentType.DOCUMENT)
    document_status: Mapped[DocumentStatus] = mapped_column(_enum(DocumentStatus), default=DocumentStatus.DRAFT)
    storage_type: Mapped[StorageType | None] = mapped_column(_enum(StorageType), nullable=True)
    storage_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    security_level: Mapped[SecurityLevel] = mapped_column(_enum(SecurityLevel), default=SecurityLevel.INTERNAL)
    folder_id: Mapped[str | None] = mapped_column(ForeignKey("folders.folder_id", ondelete="SET NULL"), nullable=True, index=True)
    is_encrypted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_indexed: Mapped[bool] = mapped_column(Boolean, default=False)
    expiration_date: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    retention_date: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    checksum: Mapped[str | None] = mapped_column(String(128), nullable=True)
    # Number of versions created so far; only ever increases.
    version: Mapped[int] = mapped_column(Integer, default=0)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class DocumentVersion(Base):
    __tablename__ = "document_versions"
    __table_args__ = (UniqueConstraint("document_id", "version_number", name="uq_document_version_number"),)

    version_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(ForeignKey("documents.document_id", ondelete="CASCADE"), index=True)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    version_label: Mapped[str | None] = mapped_column(String(50), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    file_extension: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(200), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    storage_type: Mapped[StorageType | None] = mapped_column(_enum(StorageType), nullable=True)
    storage_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_encrypted: Mapped[bool] = mapped_column(Boolean, default=False)
    change_summary: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    is_major_version: Mapped[bool] = mapped_column(Boolean, default=False)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class DocumentPermission(Base):
    __tablename__ = "document_permissions"

    permission_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(ForeignKey("documents.document_id", ondelete="CASCADE"), index=True)
    party_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    permission_type: Mapped[PermissionType] = mapped_column(_enum(PermissionType), nullable=False)
    is_granted: Mapped[bool] = mapped_column(Boolean, default=True)
    expiration_date: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class DocumentSignature(Base):
    __tablename__ = "document_signatures"

    signature_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(ForeignKey("documents.document_id", ondelete="CASCADE"), index=True)
    document_version_id: Mapped[str | None] = mapped_column(
        ForeignKey("document_versions.version_id", ondelete="SET NULL"), nullable=True, index=True
    )
    signer_party_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    signer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    signer_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    signature_type: Mapped[SignatureType | None] = mapped_column(_enum(SignatureType), nullable=True)
    signature_format: Mapped[SignatureFormat | None] = mapped_column(_enum(SignatureFormat), nullable=True)
    signature_status: Mapped[SignatureStatus] = mapped_column(_enum(SignatureStatus), default=SignatureStatus.PENDING, index=True)
    signature_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    signature_certificate: Mapped[str | None] = mapped_column(Text, nullable=True)
    signature_position_x: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signature_position_y: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signature_page: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signature_width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signature_height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signature_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    signature_location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    signature_contact_info: Mapped[str | None] = mapped_column(String(500), nullable=True)
    expiration_date: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    signed_at: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    custom_signature_message: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    signer_language: Mapped[str | None] = mapped_column(String(10), nullable=True)
    signer_time_zone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    signing_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    signer_role: Mapped[str | None] = mapped_column(String(50), nullable=True)
    signature_required: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    authentication_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # Set only by the signing workflow after the provider accepted the request.
    external_signer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    signing_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    ecm_metadata: Mapped[str | None] = mapped_column(Text, nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class SignatureRequest(Base):
    __tablename__ = "signature_requests"

    request_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    signature_id: Mapped[str] = mapped_column(ForeignKey("document_signatures.signature_id", ondelete="CASCADE"), index=True)
    request_reference: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    request_status: Mapped[SignatureStatus] = mapped_column(_enum(SignatureStatus), default=SignatureStatus.PENDING, index=True)
    request_message: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    notification_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    notification_sent_at: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    reminder_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    reminder_sent_at: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    expiration_date: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True, index=True)
    completed_at: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class SignatureVerification(Base):
    __tablename__ = "signature_verifications"

    verification_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    signature_id: Mapped[str] = mapped_column(ForeignKey("document_signatures.signature_id", ondelete="CASCADE"), index=True)
    verification_status: Mapped[VerificationStatus] = mapped_column(
        _enum(VerificationStatus), default=VerificationStatus.NOT_VERIFIED, index=True
    )
    verification_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    verification_provider: Mapped[str | None] = mapped_column(String(200), nullable=True)
    verification_timestamp: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, index=True)
    certificate_valid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    certificate_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    certificate_issuer: Mapped[str | None] = mapped_column(String(500), nullable=True)
    certificate_subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    certificate_valid_from: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    certificate_valid_until: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    document_integrity_valid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class Tag(Base):
    __tablename__ = "tags"

    tag_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_system_tag: Mapped[bool] = mapped_column(Boolean, default=False)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class DocumentTag(Base):
    __tablename__ = "document_tags"
    __table_args__ = (UniqueConstraint("document_id", "tag_id", name="uq_document_tag"),)

    document_tag_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(ForeignKey("documents.document_id", ondelete="CASCADE"), index=True)
    tag_id: Mapped[str] = mapped_column(ForeignKey("tags.tag_id", ondelete="CASCADE"), index=True)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class DocumentMetadata(Base):
    __tablename__ = "document_metadata"

    metadata_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(ForeignKey("documents.document_id", ondelete="CASCADE"), index=True)
    key: Mapped[str] = mapped_column(String(200), nullable=False)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    value_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_searchable: Mapped[bool] = mapped_column(Boolean, default=False)
    is_system_metadata: Mapped[bool] = mapped_column(Boolean, default=False)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}


class SignatureProvider(Base):
    __tablename__ = "signature_providers"

    provider_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    # Identifies the provider integration behind the signature capability.
    provider_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # At most one default per tenant.
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), default=now_utc, onupdate=now_utc)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": lock_version}
