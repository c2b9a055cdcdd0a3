from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm.exc import StaleDataError

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry
from dms_api.models import SignatureRequest, SignatureStatus
from dms_api.schemas.document import DocumentIn
from dms_api.schemas.signature import SignatureIn, SignatureRequestIn
from dms_api.services.document_service import DocumentService
from dms_api.services.signature_request_service import SignatureRequestService
from dms_api.services.signature_service import SignatureService
from tests.fakes import FakeEcm

NOW = datetime.now(timezone.utc)


async def _pending_signature(sessions) -> str:
    async with sessions() as setup:
        document = await DocumentService(setup, CapabilityRegistry()).create(DocumentIn(name="deed"))
        signature = await SignatureService(setup, CapabilityRegistry()).initiate_signing_process(
            SignatureIn(document_id=document.document_id), now=NOW
        )
        return signature.signature_id


async def test_conflicting_signature_writes_are_rejected(sessions):
    signature_id = await _pending_signature(sessions)

    async with sessions() as first, sessions() as second:
        await SignatureService(first, CapabilityRegistry()).get(signature_id)
        await SignatureService(second, CapabilityRegistry()).cancel_signature(signature_id)

        with pytest.raises(StaleDataError):
            await SignatureService(first, CapabilityRegistry()).cancel_signature(signature_id)

    async with sessions() as check:
        row = await SignatureService(check, CapabilityRegistry()).get(signature_id)
        assert row.signature_status == SignatureStatus.CANCELED
        assert row.lock_version == 2


async def test_expiry_sweep_skips_rows_changed_concurrently(sessions, monkeypatch):
    signature_id = await _pending_signature(sessions)
    async with sessions() as setup:
        svc = SignatureRequestService(setup, CapabilityRegistry())
        request_ids = []
        for _ in range(2):
            row = await svc.create(SignatureRequestIn(signature_id=signature_id, expiration_date=NOW - timedelta(hours=1)))
            request_ids.append(row.request_id)

    raced = []
    async with sessions() as session:
        real_commit = session.commit

        async def commit_after_concurrent_signing():
            # The first row the sweep touches is signed by another writer before the sweep commits.
            if not raced:
                (pending,) = session.dirty
                raced.append(pending.request_id)
                async with sessions() as other:
                    theirs = await other.get(SignatureRequest, pending.request_id)
                    theirs.request_status = SignatureStatus.SIGNED
                    await other.commit()
            await real_commit()

        monkeypatch.setattr(session, "commit", commit_after_concurrent_signing)
        expired = await SignatureRequestService(session, CapabilityRegistry()).process_expired_requests(now=NOW)
        expired_ids = [r.request_id for r in expired]

    (skipped,) = raced
    assert expired_ids == [request_id for request_id in request_ids if request_id != skipped]
    async with sessions() as check:
        svc = SignatureRequestService(check, CapabilityRegistry())
        assert (await svc.get(skipped)).request_status == SignatureStatus.SIGNED
        assert (await svc.get(expired_ids[0])).request_status == SignatureStatus.EXPIRED


async def test_concurrent_reminders_resend_twice_but_flag_once(sessions):
    provider = FakeEcm()
    registry = CapabilityRegistry({CapabilityKind.SIGNATURE: provider})
    signature_id = await _pending_signature(sessions)
    async with sessions() as setup:
        request = await SignatureRequestService(setup, registry).create(
            SignatureRequestIn(signature_id=signature_id, request_reference="env-1")
        )

    async with sessions() as first, sessions() as second:
        a = SignatureRequestService(first, registry)
        b = SignatureRequestService(second, registry)
        await a.get(request.request_id)
        await b.get(request.request_id)

        reminded = await a.send_reminder(request.request_id)
        with pytest.raises(StaleDataError):
            await b.send_reminder(request.request_id)

    assert provider.arguments("resend_notification") == ["env-1", "env-1"]
    async with sessions() as check:
        row = await SignatureRequestService(check, registry).get(request.request_id)
        assert row.reminder_sent is True
        assert row.reminder_sent_at == reminded.reminder_sent_at
        assert row.lock_version == 2
