"""Signature workflow: initiation, cancellation and completion checks.

Signature states move ``PENDING -> IN_PROGRESS -> terminal``; a terminal
state (signed, rejected, expired, revoked, failed, canceled) is never left
again, except that cancellation may overwrite any state other than signed.
"""

from datetime import datetime

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry, best_effort
from dms_api.core.config import Settings, settings
from dms_api.core.errors import illegal_state, not_found, validation_failed
from dms_api.models import (
    Document,
    DocumentSignature,
    SignatureRequest,
    SignatureStatus,
    SignatureVerification,
    now_utc,
)
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.signature import SignatureIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id
from dms_api.services.signature_parameters import build_signature_request, validate_signature_parameters

log = structlog.get_logger(__name__)

PROVIDER_REQUEST_MESSAGE = "Signature request created via ECM"

# Fields owned by the workflow; callers cannot set them through update.
WORKFLOW_FIELDS = {"signature_id", "signature_status", "signed_at", "external_signer_id", "signing_url"}


def can_transition(current: SignatureStatus, target: SignatureStatus) -> bool:
    if current == target:
        return True
    if current.is_terminal:
        return False
    if current == SignatureStatus.IN_PROGRESS:
        return target != SignatureStatus.PENDING
    return True


def apply_status(row: DocumentSignature, target: SignatureStatus, now: datetime | None = None) -> None:
    if not can_transition(row.signature_status, target):
        raise illegal_state(
            f"Signature cannot move from {row.signature_status.value} to {target.value}",
            {"signature_id": row.signature_id, "current": row.signature_status.value, "target": target.value},
        )
    if target == SignatureStatus.SIGNED and row.signed_at is None:
        row.signed_at = now or now_utc()
    row.signature_status = target


class SignatureService:
    def __init__(self, session: AsyncSession, capabilities: CapabilityRegistry | None = None, config: Settings | None = None):
        self.session = session
        self.capabilities = capabilities or get_capabilities()
        self.config = config or settings

    async def get(self, signature_id: str) -> DocumentSignature:
        row = await self.session.get(DocumentSignature, signature_id)
        if not row:
            raise not_found("signature", signature_id)
        return row

    async def _list(self, *conditions) -> list[DocumentSignature]:
        stmt = select(DocumentSignature).where(*conditions).order_by(
            DocumentSignature.signing_order, DocumentSignature.created_at
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_document(self, document_id: str) -> list[DocumentSignature]:
        return await self._list(DocumentSignature.document_id == document_id)

    async def list_for_version(self, document_version_id: str) -> list[DocumentSignature]:
        return await self._list(DocumentSignature.document_version_id == document_version_id)

    async def list_for_signer(self, signer_party_id: str) -> list[DocumentSignature]:
        return await self._list(DocumentSignature.signer_party_id == signer_party_id)

    async def list_by_status(self, status: SignatureStatus) -> list[DocumentSignature]:
        return await self._list(DocumentSignature.signature_status == status)

    async def initiate_signing_process(self, data: SignatureIn, now: datetime | None = None) -> DocumentSignature:
        now = now or now_utc()
        errors = validate_signature_parameters(data, now)
        if errors:
            raise validation_failed(errors)
        reject_supplied_id(data.signature_id, "signature_id")
        if not await self.session.get(Document, data.document_id):
            raise not_found("document", data.document_id)

        row = DocumentSignature(
            **data.model_dump(exclude=WORKFLOW_FIELDS),
            signature_status=SignatureStatus.PENDING,
        )
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_created", signature_id=row.signature_id, document_id=row.document_id)

        port = self.capabilities.signature()
        if port is None:
            log.warning(
                "signature_provider_unavailable",
                signature_id=row.signature_id,
                hint="signing must be completed out of band",
            )
            return row

        request = build_signature_request(row, self.config.tenant_defaults(row.tenant_id).signature, now)
        outcome = await best_effort(
            CapabilityKind.SIGNATURE,
            "create_signature_request",
            lambda: port.create_signature_request(request),
            signature_id=row.signature_id,
            document_id=row.document_id,
        )
        if not outcome.ok:
            return row

        result = outcome.value
        row.external_signer_id = result.external_id
        if result.signing_url:
            row.signing_url = result.signing_url
        self.session.add(
            SignatureRequest(
                signature_id=row.signature_id,
                request_reference=result.external_id,
                request_status=SignatureStatus.PENDING,
                request_message=PROVIDER_REQUEST_MESSAGE,
                expiration_date=request.expires_at,
                tenant_id=row.tenant_id,
                created_by=row.created_by,
            )
        )
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_request_initiated", signature_id=row.signature_id, external_id=result.external_id)
        return row

    async def update(self, data: SignatureIn) -> DocumentSignature:
        signature_id = require_id(data.signature_id, "signature_id")
        row = await self.get(signature_id)
        if data.signature_status is not None:
            apply_status(row, data.signature_status)

        apply_fields(row, data.model_dump(exclude=WORKFLOW_FIELDS))
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_updated", signature_id=signature_id, status=row.signature_status.value)
        return row

    async def cancel_signature(self, signature_id: str) -> DocumentSignature:
        row = await self.get(signature_id)
        if row.signature_status == SignatureStatus.SIGNED:
            raise illegal_state("Cannot cancel a signed signature", {"signature_id": signature_id})

        now = now_utc()
        row.signature_status = SignatureStatus.CANCELED
        stmt = select(SignatureRequest).where(
            SignatureRequest.signature_id == signature_id,
            SignatureRequest.request_status.in_([SignatureStatus.PENDING, SignatureStatus.IN_PROGRESS]),
        )
        for request in (await self.session.execute(stmt)).scalars():
            request.request_status = SignatureStatus.CANCELED
            request.completed_at = now
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_canceled", signature_id=signature_id)

        port = self.capabilities.signature()
        if port is not None:
            reference = row.external_signer_id or row.signature_id
            await best_effort(
                CapabilityKind.SIGNATURE,
                "delete_signature_request",
                lambda: port.delete_signature_request(reference),
                signature_id=signature_id,
            )
        return row

    async def is_document_fully_signed(self, document_id: str) -> bool:
        stmt = (
            select(DocumentSignature.signature_status, func.count())
            .where(
                DocumentSignature.document_id == document_id,
                DocumentSignature.signature_status.in_([SignatureStatus.PENDING, SignatureStatus.SIGNED]),
            )
            .group_by(DocumentSignature.signature_status)
        )
        counts = dict((await self.session.execute(stmt)).all())
        return counts.get(SignatureStatus.PENDING, 0) == 0 and counts.get(SignatureStatus.SIGNED, 0) > 0

    async def delete(self, signature_id: str) -> None:
        row = await self.get(signature_id)
        await self.session.execute(delete(SignatureVerification).where(SignatureVerification.signature_id == signature_id))
        await self.session.execute(delete(SignatureRequest).where(SignatureRequest.signature_id == signature_id))
        await self.session.delete(row)
        await self.session.commit()
        log.info("signature_deleted", signature_id=signature_id)
