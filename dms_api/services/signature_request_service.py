from datetime import datetime, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry, best_effort
from dms_api.core.config import Settings, settings
from dms_api.core.errors import not_found
from dms_api.core.status_mapping import SIGNATURE_STATUS
from dms_api.models import DocumentSignature, SignatureRequest, SignatureStatus, ensure_utc, now_utc
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.signature import SignatureRequestIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id
from dms_api.services.signature_service import apply_status, can_transition

log = structlog.get_logger(__name__)


class SignatureRequestService:
    def __init__(self, session: AsyncSession, capabilities: CapabilityRegistry | None = None, config: Settings | None = None):
        self.session = session
        self.capabilities = capabilities or get_capabilities()
        self.config = config or settings

    async def get(self, request_id: str) -> SignatureRequest:
        row = await self.session.get(SignatureRequest, request_id)
        if not row:
            raise not_found("signature_request", request_id)
        return row

    async def get_by_reference(self, request_reference: str) -> SignatureRequest:
        stmt = select(SignatureRequest).where(SignatureRequest.request_reference == request_reference)
        row = (await self.session.execute(stmt)).scalars().first()
        if not row:
            raise not_found("signature_request", request_reference)
        return row

    async def list_for_signature(self, signature_id: str) -> list[SignatureRequest]:
        stmt = (
            select(SignatureRequest)
            .where(SignatureRequest.signature_id == signature_id)
            .order_by(SignatureRequest.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_status(self, status: SignatureStatus) -> list[SignatureRequest]:
        stmt = select(SignatureRequest).where(SignatureRequest.request_status == status).order_by(SignatureRequest.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: SignatureRequestIn) -> SignatureRequest:
        reject_supplied_id(data.request_id, "request_id")
        if not await self.session.get(DocumentSignature, data.signature_id):
            raise not_found("signature", data.signature_id)

        values = data.model_dump(exclude={"request_id"})
        values["request_status"] = data.request_status or SignatureStatus.PENDING
        values["notification_sent"] = bool(data.notification_sent)
        values["reminder_sent"] = bool(data.reminder_sent)

        row = SignatureRequest(**values)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_request_created", request_id=row.request_id, signature_id=row.signature_id)
        return row

    async def update(self, data: SignatureRequestIn) -> SignatureRequest:
        request_id = require_id(data.request_id, "request_id")
        row = await self.get(request_id)

        delivery = {"notification_sent", "notification_sent_at", "reminder_sent", "reminder_sent_at"}
        values = data.model_dump(exclude={"request_id"} | delivery)
        if values["request_status"] is None:
            values.pop("request_status")
        apply_fields(row, values)

        # Delivery flags only ever go from false to true; the first stamp is kept.
        if data.notification_sent and not row.notification_sent:
            row.notification_sent = True
            row.notification_sent_at = data.notification_sent_at or now_utc()
        if data.reminder_sent and not row.reminder_sent:
            row.reminder_sent = True
            row.reminder_sent_at = data.reminder_sent_at or now_utc()

        await self.session.commit()
        await self.session.refresh(row)
        log.info("signature_request_updated", request_id=request_id)
        return row

    async def delete(self, request_id: str) -> None:
        row = await self.get(request_id)
        await self.session.delete(row)
        await self.session.commit()
        log.info("signature_request_deleted", request_id=request_id)

    async def _resend(self, row: SignatureRequest, operation: str) -> None:
        port = self.capabilities.signature()
        if port is None:
            log.info("signature_notification_recorded_locally", request_id=row.request_id, operation=operation)
            return
        reference = row.request_reference or row.request_id
        await best_effort(
            CapabilityKind.SIGNATURE,
            "resend_notification",
            lambda: port.resend_notification(reference),
            request_id=row.request_id,
            purpose=operation,
        )

    async def send_notification(self, request_id: str) -> SignatureRequest:
        row = await self.get(request_id)
        await self._resend(row, "send_notification")
        if not row.notification_sent:
            row.notification_sent = True
            row.notification_sent_at = now_utc()
            await self.session.commit()
            await self.session.refresh(row)
        log.info("signature_notification_sent", request_id=request_id)
        return row

    async def send_reminder(self, request_id: str) -> SignatureRequest:
        row = await self.get(request_id)
        await self._resend(row, "send_reminder")
        if not row.reminder_sent:
            row.reminder_sent = True
            row.reminder_sent_at = now_utc()
            await self.session.commit()
            await self.session.refresh(row)
        log.info("signature_reminder_sent", request_id=request_id)
        return row

    async def process_expired_requests(self, now: datetime | None = None) -> list[SignatureRequest]:
        now = now or now_utc()
        stmt = select(SignatureRequest.request_id).where(
            SignatureRequest.request_status == SignatureStatus.PENDING,
            SignatureRequest.expiration_date.is_not(None),
            SignatureRequest.expiration_date < now,
        )
        candidates = list((await self.session.execute(stmt)).scalars().all())

        expired = []
        for request_id in candidates:
            row = await self.session.get(SignatureRequest, request_id, populate_existing=True)
            if row is None or row.request_status != SignatureStatus.PENDING:
                continue
            row.request_status = SignatureStatus.EXPIRED
            try:
                await self.session.commit()
            except StaleDataError:
                # Changed concurrently; the other writer's state wins.
                await self.session.rollback()
                for done in expired:
                    await self.session.refresh(done)
                log.warning("signature_request_expiry_skipped", request_id=request_id)
                continue
            expired.append(row)

        log.info("signature_requests_expired", count=len(expired), candidates=len(candidates))
        return expired

    async def send_due_reminders(self, now: datetime | None = None) -> list[SignatureRequest]:
        now = now or now_utc()
        stmt = select(SignatureRequest).where(
            SignatureRequest.request_status == SignatureStatus.PENDING,
            SignatureRequest.notification_sent.is_(True),
            SignatureRequest.reminder_sent.is_(False),
            SignatureRequest.notification_sent_at.is_not(None),
        )
        candidates = list((await self.session.execute(stmt)).scalars().all())

        reminded = []
        for row in candidates:
            defaults = self.config.tenant_defaults(row.tenant_id).signature
            if not defaults.send_reminders:
                continue
            if ensure_utc(row.notification_sent_at) > now - timedelta(days=defaults.reminder_interval_days):
                continue
            reminded.append(await self.send_reminder(row.request_id))

        log.info("signature_reminders_sent", count=len(reminded), candidates=len(candidates))
        return reminded

    async def record_provider_status(self, request_reference: str, external_status: str) -> SignatureRequest:
        row = await self.get_by_reference(request_reference)
        status = SIGNATURE_STATUS.to_local(external_status)
        if row.request_status.is_terminal:
            log.info(
                "provider_status_ignored",
                request_id=row.request_id,
                current=row.request_status.value,
                external_status=external_status,
            )
            return row

        now = now_utc()
        row.request_status = status
        if status.is_terminal:
            row.completed_at = now

        signature = await self.session.get(DocumentSignature, row.signature_id)
        if signature is not None and signature.signature_status != status and can_transition(signature.signature_status, status):
            apply_status(signature, status, now)

        await self.session.commit()
        await self.session.refresh(row)
        log.info(
            "provider_status_recorded",
            request_id=row.request_id,
            external_status=external_status,
            status=status.value,
        )
        return row
