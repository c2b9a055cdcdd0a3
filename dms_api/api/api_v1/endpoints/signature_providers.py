from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.db.session import get_session
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.signature_provider import SignatureProviderIn, SignatureProviderOut
from dms_api.services.signature_provider_service import SignatureProviderService

router = APIRouter(prefix="/signature_providers")


@router.post("", response_model=SignatureProviderOut)
async def create_signature_provider(request: SignatureProviderIn, session: AsyncSession = Depends(get_session)):
    svc = SignatureProviderService(session)
    row = await svc.create(request)
    return SignatureProviderOut.model_validate(row)


@router.get("", response_model=list[SignatureProviderOut])
async def list_signature_providers(
    tenant_id: str | None = None,
    active_only: bool = False,
    session: AsyncSession = Depends(get_session),
):
    svc = SignatureProviderService(session)
    rows = await svc.list_providers(tenant_id, active_only)
    return [SignatureProviderOut.model_validate(r) for r in rows]


@router.get("/default", response_model=SignatureProviderOut | None)
async def get_default_signature_provider(tenant_id: str | None = None, session: AsyncSession = Depends(get_session)):
    svc = SignatureProviderService(session)
    row = await svc.get_default_provider(tenant_id)
    return SignatureProviderOut.model_validate(row) if row else None


@router.get("/{provider_id}", response_model=SignatureProviderOut)
async def get_signature_provider(provider_id: str, session: AsyncSession = Depends(get_session)):
    svc = SignatureProviderService(session)
    row = await svc.get(provider_id)
    return SignatureProviderOut.model_validate(row)


@router.put("/{provider_id}", response_model=SignatureProviderOut)
async def update_signature_provider(
    provider_id: str,
    request: SignatureProviderIn,
    session: AsyncSession = Depends(get_session),
):
    svc = SignatureProviderService(session)
    row = await svc.update(request.model_copy(update={"provider_id": provider_id}))
    return SignatureProviderOut.model_validate(row)


@router.post("/{provider_id}/default", response_model=SignatureProviderOut)
async def set_default_signature_provider(
    provider_id: str,
    tenant_id: str | None = None,
    session: AsyncSession = Depends(get_session),
):
    svc = SignatureProviderService(session)
    row = await svc.set_as_default(provider_id, tenant_id)
    return SignatureProviderOut.model_validate(row)


@router.delete("/{provider_id}", response_model=DeleteResponse)
async def delete_signature_provider(provider_id: str, session: AsyncSession = Depends(get_session)):
    svc = SignatureProviderService(session)
    await svc.delete(provider_id)
    return DeleteResponse(ok=True, entity="signature_provider", entity_id=provider_id)
