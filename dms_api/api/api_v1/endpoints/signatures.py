from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import require_document
from dms_api.core.capabilities import CapabilityRegistry
from dms_api.core.errors import invalid_argument
from dms_api.db.session import get_session
from dms_api.models import SignatureStatus
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.signature import DocumentSigningStatusOut, SignatureIn, SignatureOut
from dms_api.services.signature_service import SignatureService

router = APIRouter()


@router.post("/signatures", response_model=SignatureOut)
async def initiate_signing_process(
    request: SignatureIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    row = await svc.initiate_signing_process(request)
    return SignatureOut.model_validate(row)


@router.get("/signatures", response_model=list[SignatureOut])
async def list_signatures(
    status: SignatureStatus | None = None,
    signer_party_id: str | None = None,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    if signer_party_id is not None:
        rows = await svc.list_for_signer(signer_party_id)
    elif status is not None:
        rows = await svc.list_by_status(status)
    else:
        raise invalid_argument("Filter by status or signer_party_id", {"status": None, "signer_party_id": None})
    if status is not None:
        rows = [r for r in rows if r.signature_status == status]
    return [SignatureOut.model_validate(r) for r in rows]


@router.get("/signatures/{signature_id}", response_model=SignatureOut)
async def get_signature(
    signature_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    row = await svc.get(signature_id)
    return SignatureOut.model_validate(row)


@router.put("/signatures/{signature_id}", response_model=SignatureOut)
async def update_signature(
    signature_id: str,
    request: SignatureIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    row = await svc.update(request.model_copy(update={"signature_id": signature_id}))
    return SignatureOut.model_validate(row)


@router.delete("/signatures/{signature_id}", response_model=DeleteResponse)
async def delete_signature(
    signature_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    await svc.delete(signature_id)
    return DeleteResponse(ok=True, entity="signature", entity_id=signature_id)


@router.post("/signatures/{signature_id}/cancel", response_model=SignatureOut)
async def cancel_signature(
    signature_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    row = await svc.cancel_signature(signature_id)
    return SignatureOut.model_validate(row)


@router.get("/documents/{document_id}/signatures", response_model=list[SignatureOut])
async def list_document_signatures(
    document_id: str,
    _document=Depends(require_document),
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    rows = await svc.list_for_document(document_id)
    return [SignatureOut.model_validate(r) for r in rows]


@router.get("/documents/{document_id}/signing-status", response_model=DocumentSigningStatusOut)
async def get_document_signing_status(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    fully_signed = await svc.is_document_fully_signed(document_id)
    return DocumentSigningStatusOut(document_id=document_id, fully_signed=fully_signed)


@router.get("/document_versions/{version_id}/signatures", response_model=list[SignatureOut])
async def list_document_version_signatures(
    version_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureService(session, capabilities)
    rows = await svc.list_for_version(version_id)
    return [SignatureOut.model_validate(r) for r in rows]
