from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import require_document
from dms_api.db.session import get_session
from dms_api.models import VerificationStatus
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.signature import VerificationIn, VerificationOut
from dms_api.services.verification_service import VerificationService

router = APIRouter()


@router.post("/verifications", response_model=VerificationOut)
async def create_verification(request: VerificationIn, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    row = await svc.create(request)
    return VerificationOut.model_validate(row)


@router.get("/verifications", response_model=list[VerificationOut])
async def list_verifications_by_status(status: VerificationStatus, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    rows = await svc.list_by_status(status)
    return [VerificationOut.model_validate(r) for r in rows]


@router.get("/verifications/{verification_id}", response_model=VerificationOut)
async def get_verification(verification_id: str, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    row = await svc.get(verification_id)
    return VerificationOut.model_validate(row)


@router.put("/verifications/{verification_id}", response_model=VerificationOut)
async def update_verification(
    verification_id: str,
    request: VerificationIn,
    session: AsyncSession = Depends(get_session),
):
    svc = VerificationService(session)
    row = await svc.update(request.model_copy(update={"verification_id": verification_id}))
    return VerificationOut.model_validate(row)


@router.delete("/verifications/{verification_id}", response_model=DeleteResponse)
async def delete_verification(verification_id: str, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    await svc.delete(verification_id)
    return DeleteResponse(ok=True, entity="verification", entity_id=verification_id)


@router.post("/signatures/{signature_id}/verify", response_model=VerificationOut)
async def verify_signature(signature_id: str, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    row = await svc.verify_signature(signature_id)
    return VerificationOut.model_validate(row)


@router.get("/signatures/{signature_id}/verifications", response_model=list[VerificationOut])
async def list_signature_verifications(signature_id: str, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    rows = await svc.list_for_signature(signature_id)
    return [VerificationOut.model_validate(r) for r in rows]


@router.get("/signatures/{signature_id}/verifications/latest", response_model=VerificationOut | None)
async def get_latest_verification(signature_id: str, session: AsyncSession = Depends(get_session)):
    svc = VerificationService(session)
    row = await svc.get_latest_verification(signature_id)
    return VerificationOut.model_validate(row) if row else None


@router.post("/documents/{document_id}/verify", response_model=list[VerificationOut])
async def verify_all_document_signatures(
    document_id: str,
    _document=Depends(require_document),
    session: AsyncSession = Depends(get_session),
):
    svc = VerificationService(session)
    rows = await svc.verify_all_signatures_for_document(document_id)
    return [VerificationOut.model_validate(r) for r in rows]
