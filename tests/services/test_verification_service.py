from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from dms_api.core.capabilities import CapabilityRegistry
from dms_api.core.config import Settings
from dms_api.models import VerificationStatus, ensure_utc
from dms_api.schemas.document import DocumentIn
from dms_api.schemas.signature import SignatureIn, VerificationIn
from dms_api.services.document_service import DocumentService
from dms_api.services.signature_service import SignatureService
from dms_api.services.verification_service import VerificationService

NOW = datetime.now(timezone.utc)


async def _document_with_signatures(session, *statuses: str) -> tuple[str, list[str]]:
    registry = CapabilityRegistry()
    document = await DocumentService(session, registry).create(DocumentIn(name="deed"))
    signatures = SignatureService(session, registry)
    ids = []
    for status in statuses:
        row = await signatures.initiate_signing_process(
            SignatureIn(document_id=document.document_id, signer_name="Ann Lee"), now=NOW
        )
        if status != "PENDING":
            await signatures.update(
                SignatureIn(
                    signature_id=row.signature_id,
                    document_id=document.document_id,
                    signer_name="Ann Lee",
                    signature_status=status,
                )
            )
        ids.append(row.signature_id)
    return document.document_id, ids


async def test_signed_signature_verifies_valid(session):
    _, (signature_id,) = await _document_with_signatures(session, "SIGNED")
    svc = VerificationService(session, Settings(verification_provider="test-provider"))

    row = await svc.verify_signature(signature_id, now=NOW)
    assert row.verification_status == VerificationStatus.VALID
    assert row.verification_provider == "test-provider"
    assert row.certificate_valid is True
    assert row.document_integrity_valid is True
    assert row.certificate_subject == "CN=Ann Lee"
    assert ensure_utc(row.certificate_valid_from) < NOW < ensure_utc(row.certificate_valid_until)


async def test_status_drives_verification_outcome(session):
    _, (pending, rejected) = await _document_with_signatures(session, "PENDING", "REJECTED")
    svc = VerificationService(session)

    assert (await svc.verify_signature(pending)).verification_status == VerificationStatus.INDETERMINATE
    invalid = await svc.verify_signature(rejected)
    assert invalid.verification_status == VerificationStatus.INVALID
    assert invalid.document_integrity_valid is False


async def test_verify_missing_signature_is_not_found(session):
    with pytest.raises(HTTPException) as exc:
        await VerificationService(session).verify_signature("nope")
    assert exc.value.detail["code"] == "signature_not_found"


async def test_verify_all_covers_every_signature(session):
    document_id, ids = await _document_with_signatures(session, "SIGNED", "PENDING", "CANCELED")
    svc = VerificationService(session)

    results = await svc.verify_all_signatures_for_document(document_id)
    assert sorted(r.signature_id for r in results) == sorted(ids)
    assert await svc.verify_all_signatures_for_document("no-such-document") == []


async def test_latest_verification_and_history(session):
    _, (signature_id,) = await _document_with_signatures(session, "SIGNED")
    svc = VerificationService(session)
    assert await svc.get_latest_verification(signature_id) is None

    await svc.verify_signature(signature_id, now=NOW - timedelta(hours=1))
    newest = await svc.verify_signature(signature_id, now=NOW)
    assert (await svc.get_latest_verification(signature_id)).verification_id == newest.verification_id
    assert len(await svc.list_for_signature(signature_id)) == 2
    assert len(await svc.list_by_status(VerificationStatus.VALID)) == 2


async def test_manual_verification_crud(session):
    _, (signature_id,) = await _document_with_signatures(session, "PENDING")
    svc = VerificationService(session)

    row = await svc.create(VerificationIn(signature_id=signature_id, created_by="auditor"))
    assert row.verification_status == VerificationStatus.NOT_VERIFIED
    assert row.verification_timestamp is not None

    updated = await svc.update(
        VerificationIn(
            verification_id=row.verification_id,
            signature_id=signature_id,
            verification_status=VerificationStatus.FAILED,
            verification_details="provider timeout",
        )
    )
    assert updated.verification_status == VerificationStatus.FAILED
    assert updated.created_by == "auditor"

    await svc.delete(row.verification_id)
    with pytest.raises(HTTPException) as exc:
        await svc.get(row.verification_id)
    assert exc.value.detail["code"] == "verification_not_found"


async def test_verify_all_continues_past_failures(session, monkeypatch):
    document_id, ids = await _document_with_signatures(session, "SIGNED", "SIGNED", "SIGNED")
    svc = VerificationService(session)
    verify = svc.verify_signature

    async def flaky(signature_id, now=None):
        if signature_id == ids[1]:
            raise RuntimeError("verification backend unavailable")
        return await verify(signature_id, now)

    monkeypatch.setattr(svc, "verify_signature", flaky)
    results = await svc.verify_all_signatures_for_document(document_id)
    assert sorted(r.signature_id for r in results) == sorted([ids[0], ids[2]])
    assert all(r.verification_status == VerificationStatus.VALID for r in results)
