from datetime import datetime, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.config import Settings, settings
from dms_api.core.errors import not_found
from dms_api.models import (
    DocumentSignature,
    SignatureStatus,
    SignatureVerification,
    VerificationStatus,
    now_utc,
)
from dms_api.schemas.signature import VerificationIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)

CERTIFICATE_WINDOW = timedelta(days=365)


class VerificationService:
    def __init__(self, session: AsyncSession, config: Settings | None = None):
        self.session = session
        self.config = config or settings

    async def get(self, verification_id: str) -> SignatureVerification:
        row = await self.session.get(SignatureVerification, verification_id)
        if not row:
            raise not_found("verification", verification_id)
        return row

    async def list_for_signature(self, signature_id: str) -> list[SignatureVerification]:
        stmt = (
            select(SignatureVerification)
            .where(SignatureVerification.signature_id == signature_id)
            .order_by(SignatureVerification.verification_timestamp.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_status(self, status: VerificationStatus) -> list[SignatureVerification]:
        stmt = (
            select(SignatureVerification)
            .where(SignatureVerification.verification_status == status)
            .order_by(SignatureVerification.verification_timestamp.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_latest_verification(self, signature_id: str) -> SignatureVerification | None:
        stmt = (
            select(SignatureVerification)
            .where(SignatureVerification.signature_id == signature_id)
            .order_by(SignatureVerification.verification_timestamp.desc(), SignatureVerification.created_at.desc())
            .limit(1)
        )
        return (await self.session.execute(stmt)).scalars().first()

    async def create(self, data: VerificationIn) -> SignatureVerification:
        reject_supplied_id(data.verification_id, "verification_id")
        if not await self.session.get(DocumentSignature, data.signature_id):
            raise not_found("signature", data.signature_id)

        values = data.model_dump(exclude={"verification_id"})
        values["verification_status"] = data.verification_status or VerificationStatus.NOT_VERIFIED
        values["verification_timestamp"] = data.verification_timestamp or now_utc()
        row = await self._save(SignatureVerification(**values))
        log.info("verification_created", verification_id=row.verification_id, signature_id=row.signature_id)
        return row

    async def update(self, data: VerificationIn) -> SignatureVerification:
        verification_id = require_id(data.verification_id, "verification_id")
        row = await self.get(verification_id)

        values = data.model_dump(exclude={"verification_id"})
        for key in ("verification_status", "verification_timestamp"):
            if values[key] is None:
                values.pop(key)
        apply_fields(row, values)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("verification_updated", verification_id=verification_id)
        return row

    async def delete(self, verification_id: str) -> None:
        row = await self.get(verification_id)
        await self.session.delete(row)
        await self.session.commit()
        log.info("verification_deleted", verification_id=verification_id)

    async def verify_signature(self, signature_id: str, now: datetime | None = None) -> SignatureVerification:
        signature = await self.session.get(DocumentSignature, signature_id)
        if not signature:
            raise not_found("signature", signature_id)
        row = self._assess(signature, now or now_utc())
        await self._save(row)
        log.info("signature_verified", signature_id=signature_id, status=row.verification_status.value)
        return row

    async def verify_all_signatures_for_document(self, document_id: str) -> list[SignatureVerification]:
        stmt = select(DocumentSignature.signature_id).where(DocumentSignature.document_id == document_id)
        signature_ids = list((await self.session.execute(stmt)).scalars().all())

        results = []
        for signature_id in signature_ids:
            try:
                results.append(await self.verify_signature(signature_id))
            except Exception as exc:
                await self.session.rollback()
                # Rollback expires everything loaded so far, earlier results included.
                for row in results:
                    await self.session.refresh(row)
                log.warning(
                    "signature_verification_failed",
                    signature_id=signature_id,
                    document_id=document_id,
                    error=str(exc),
                )
        log.info("document_signatures_verified", document_id=document_id, verified=len(results), total=len(signature_ids))
        return results

    def _assess(self, signature: DocumentSignature, now: datetime) -> SignatureVerification:
        provider = self.config.verification_provider
        base = {
            "signature_id": signature.signature_id,
            "verification_provider": provider,
            "verification_timestamp": now,
            "tenant_id": signature.tenant_id,
        }
        status = signature.signature_status
        if status == SignatureStatus.SIGNED:
            subject = signature.signer_name or signature.signer_email or signature.signer_party_id
            return SignatureVerification(
                **base,
                verification_status=VerificationStatus.VALID,
                verification_details="Signature verified successfully",
                certificate_valid=True,
                certificate_details=signature.signature_certificate,
                certificate_issuer=provider,
                certificate_subject=f"CN={subject}" if subject else None,
                certificate_valid_from=now - CERTIFICATE_WINDOW,
                certificate_valid_until=now + CERTIFICATE_WINDOW,
                document_integrity_valid=True,
            )
        if not status.is_terminal:
            return SignatureVerification(
                **base,
                verification_status=VerificationStatus.INDETERMINATE,
                verification_details=f"Signature is not signed yet (status {status.value})",
            )
        return SignatureVerification(
            **base,
            verification_status=VerificationStatus.INVALID,
            verification_details=f"Signature ended without being signed (status {status.value})",
            certificate_valid=False,
            document_integrity_valid=False,
        )

    async def _save(self, row: SignatureVerification) -> SignatureVerification:
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row
