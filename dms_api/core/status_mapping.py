"""Bidirectional mappings between local and provider status enumerations."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from dms_api.models.enums import DocumentStatus, SignatureStatus
from dms_api.ports.base import EcmDocumentStatus, EcmSignatureRequestStatus

L = TypeVar("L", bound=Enum)
E = TypeVar("E", bound=Enum)


class StatusMapping(Generic[L, E]):
    def __init__(
        self,
        local_enum: type[L],
        external_enum: type[E],
        to_external: dict[L, E],
        to_local: dict[E, L],
        *,
        local_default: L,
        external_default: E,
    ):
        self.local_enum = local_enum
        self.external_enum = external_enum
        self._to_external = dict(to_external)
        self._to_local = dict(to_local)
        self.local_default = local_default
        self.external_default = external_default

    def validate(self) -> list[str]:
        errors = []
        for member in self.local_enum:
            if member not in self._to_external:
                errors.append(f"{self.local_enum.__name__}.{member.name} has no {self.external_enum.__name__} counterpart")
        for external, local in self._to_local.items():
            if self._to_external.get(local) is None:
                errors.append(f"{self.external_enum.__name__}.{external.name} maps to unmapped {local.name}")
        return errors

    def to_external(self, status: L | None) -> E:
        if status is None:
            return self.external_default
        return self._to_external[status]

    def to_local(self, status: E | str | None) -> L:
        if status is None:
            return self.local_default
        try:
            external = self.external_enum(status)
        except ValueError:
            return self.local_default
        return self._to_local.get(external, self.local_default)


DOCUMENT_STATUS = StatusMapping(
    DocumentStatus,
    EcmDocumentStatus,
    {
        DocumentStatus.DRAFT: EcmDocumentStatus.CREATING,
        DocumentStatus.UNDER_REVIEW: EcmDocumentStatus.UNDER_REVIEW,
        DocumentStatus.APPROVED: EcmDocumentStatus.APPROVED,
        DocumentStatus.REJECTED: EcmDocumentStatus.REJECTED,
        DocumentStatus.PUBLISHED: EcmDocumentStatus.ACTIVE,
        DocumentStatus.ARCHIVED: EcmDocumentStatus.ARCHIVED,
        DocumentStatus.MARKED_FOR_DELETION: EcmDocumentStatus.DELETED,
        DocumentStatus.DELETED: EcmDocumentStatus.DELETED,
        DocumentStatus.LOCKED: EcmDocumentStatus.LOCKED,
        DocumentStatus.EXPIRED: EcmDocumentStatus.EXPIRED,
    },
    {
        EcmDocumentStatus.CREATING: DocumentStatus.DRAFT,
        EcmDocumentStatus.ACTIVE: DocumentStatus.PUBLISHED,
        EcmDocumentStatus.UNDER_REVIEW: DocumentStatus.UNDER_REVIEW,
        EcmDocumentStatus.APPROVED: DocumentStatus.APPROVED,
        EcmDocumentStatus.REJECTED: DocumentStatus.REJECTED,
        EcmDocumentStatus.ARCHIVED: DocumentStatus.ARCHIVED,
        EcmDocumentStatus.LOCKED: DocumentStatus.LOCKED,
        EcmDocumentStatus.EXPIRED: DocumentStatus.EXPIRED,
        EcmDocumentStatus.DELETED: DocumentStatus.DELETED,
    },
    local_default=DocumentStatus.DRAFT,
    external_default=EcmDocumentStatus.ACTIVE,
)

SIGNATURE_STATUS = StatusMapping(
    SignatureStatus,
    EcmSignatureRequestStatus,
    {
        SignatureStatus.PENDING: EcmSignatureRequestStatus.CREATED,
        SignatureStatus.IN_PROGRESS: EcmSignatureRequestStatus.SENT,
        SignatureStatus.SIGNED: EcmSignatureRequestStatus.SIGNED,
        SignatureStatus.REJECTED: EcmSignatureRequestStatus.DECLINED,
        SignatureStatus.EXPIRED: EcmSignatureRequestStatus.EXPIRED,
        SignatureStatus.REVOKED: EcmSignatureRequestStatus.VOIDED,
        SignatureStatus.FAILED: EcmSignatureRequestStatus.ERROR,
        SignatureStatus.CANCELED: EcmSignatureRequestStatus.CANCELLED,
    },
    {
        EcmSignatureRequestStatus.CREATED: SignatureStatus.PENDING,
        EcmSignatureRequestStatus.SENT: SignatureStatus.IN_PROGRESS,
        EcmSignatureRequestStatus.VIEWED: SignatureStatus.IN_PROGRESS,
        EcmSignatureRequestStatus.SIGNED: SignatureStatus.SIGNED,
        EcmSignatureRequestStatus.DECLINED: SignatureStatus.REJECTED,
        EcmSignatureRequestStatus.EXPIRED: SignatureStatus.EXPIRED,
        EcmSignatureRequestStatus.VOIDED: SignatureStatus.REVOKED,
        EcmSignatureRequestStatus.ERROR: SignatureStatus.FAILED,
        EcmSignatureRequestStatus.CANCELLED: SignatureStatus.CANCELED,
    },
    local_default=SignatureStatus.PENDING,
    external_default=EcmSignatureRequestStatus.CREATED,
)

ALL_MAPPINGS = (DOCUMENT_STATUS, SIGNATURE_STATUS)
