from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.capabilities import CapabilityRegistry
from dms_api.core.errors import invalid_argument
from dms_api.db.session import get_session
from dms_api.models import SignatureStatus
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.signature import ProviderStatusIn, SignatureRequestIn, SignatureRequestOut
from dms_api.services.signature_request_service import SignatureRequestService

router = APIRouter(prefix="/signature_requests")


@router.post("", response_model=SignatureRequestOut)
async def create_signature_request(
    request: SignatureRequestIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.create(request)
    return SignatureRequestOut.model_validate(row)


@router.get("", response_model=list[SignatureRequestOut])
async def list_signature_requests(
    signature_id: str | None = None,
    status: SignatureStatus | None = None,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    if signature_id is not None:
        rows = await svc.list_for_signature(signature_id)
        if status is not None:
            rows = [r for r in rows if r.request_status == status]
    elif status is not None:
        rows = await svc.list_by_status(status)
    else:
        raise invalid_argument("Filter by signature_id or status", {"signature_id": None, "status": None})
    return [SignatureRequestOut.model_validate(r) for r in rows]


@router.post("/provider-status", response_model=SignatureRequestOut)
async def record_provider_status(
    request: ProviderStatusIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.record_provider_status(request.request_reference, request.external_status)
    return SignatureRequestOut.model_validate(row)


@router.post("/expire", response_model=list[SignatureRequestOut])
async def process_expired_requests(
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    rows = await svc.process_expired_requests()
    return [SignatureRequestOut.model_validate(r) for r in rows]


@router.post("/reminders", response_model=list[SignatureRequestOut])
async def send_due_reminders(
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    rows = await svc.send_due_reminders()
    return [SignatureRequestOut.model_validate(r) for r in rows]


@router.get("/by-reference/{request_reference}", response_model=SignatureRequestOut)
async def get_signature_request_by_reference(
    request_reference: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.get_by_reference(request_reference)
    return SignatureRequestOut.model_validate(row)


@router.get("/{request_id}", response_model=SignatureRequestOut)
async def get_signature_request(
    request_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.get(request_id)
    return SignatureRequestOut.model_validate(row)


@router.put("/{request_id}", response_model=SignatureRequestOut)
async def update_signature_request(
    request_id: str,
    request: SignatureRequestIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.update(request.model_copy(update={"request_id": request_id}))
    return SignatureRequestOut.model_validate(row)


@router.delete("/{request_id}", response_model=DeleteResponse)
async def delete_signature_request(
    request_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    await svc.delete(request_id)
    return DeleteResponse(ok=True, entity="signature_request", entity_id=request_id)


@router.post("/{request_id}/notify", response_model=SignatureRequestOut)
async def send_notification(
    request_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.send_notification(request_id)
    return SignatureRequestOut.model_validate(row)


@router.post("/{request_id}/remind", response_model=SignatureRequestOut)
async def send_reminder(
    request_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = SignatureRequestService(session, capabilities)
    row = await svc.send_reminder(request_id)
    return SignatureRequestOut.model_validate(row)
