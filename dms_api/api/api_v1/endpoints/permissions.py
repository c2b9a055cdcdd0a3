from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import require_document
from dms_api.core.capabilities import CapabilityRegistry
from dms_api.db.session import get_session
from dms_api.models import PermissionType
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.permission import PermissionCheckOut, PermissionIn, PermissionOut
from dms_api.services.permission_service import PermissionService

router = APIRouter()


@router.post("/permissions", response_model=PermissionOut)
async def create_permission(
    request: PermissionIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = PermissionService(session, capabilities)
    row = await svc.create(request)
    return PermissionOut.model_validate(row)


@router.get("/permissions/{permission_id}", response_model=PermissionOut)
async def get_permission(
    permission_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = PermissionService(session, capabilities)
    row = await svc.get(permission_id)
    return PermissionOut.model_validate(row)


@router.put("/permissions/{permission_id}", response_model=PermissionOut)
async def update_permission(
    permission_id: str,
    request: PermissionIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = PermissionService(session, capabilities)
    row = await svc.update(request.model_copy(update={"permission_id": permission_id}))
    return PermissionOut.model_validate(row)


@router.delete("/permissions/{permission_id}", response_model=DeleteResponse)
async def delete_permission(
    permission_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = PermissionService(session, capabilities)
    await svc.delete(permission_id)
    return DeleteResponse(ok=True, entity="permission", entity_id=permission_id)


@router.get("/documents/{document_id}/permissions", response_model=list[PermissionOut])
async def list_document_permissions(
    document_id: str,
    _document=Depends(require_document),
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = PermissionService(session, capabilities)
    rows = await svc.list_for_document(document_id)
    return [PermissionOut.model_validate(r) for r in rows]


@router.get("/documents/{document_id}/permissions/check", response_model=PermissionCheckOut)
async def check_document_permission(
    document_id: str,
    party_id: str,
    permission_type: PermissionType,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = PermissionService(session, capabilities)
    allowed = await svc.has_permission(document_id, party_id, permission_type)
    return PermissionCheckOut(
        document_id=document_id,
        party_id=party_id,
        permission_type=permission_type,
        has_permission=allowed,
    )
