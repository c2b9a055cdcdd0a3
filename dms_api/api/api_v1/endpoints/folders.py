from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.db.session import get_session
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.folder import FolderIn, FolderOut
from dms_api.services.folder_service import FolderService

router = APIRouter(prefix="/folders")


@router.post("", response_model=FolderOut)
async def create_folder(request: FolderIn, session: AsyncSession = Depends(get_session)):
    svc = FolderService(session)
    row = await svc.create(request)
    return FolderOut.model_validate(row)


@router.get("", response_model=list[FolderOut])
async def list_root_folders(session: AsyncSession = Depends(get_session)):
    svc = FolderService(session)
    rows = await svc.list_children(None)
    return [FolderOut.model_validate(r) for r in rows]


@router.get("/{folder_id}", response_model=FolderOut)
async def get_folder(folder_id: str, session: AsyncSession = Depends(get_session)):
    svc = FolderService(session)
    row = await svc.get(folder_id)
    return FolderOut.model_validate(row)


@router.get("/{folder_id}/children", response_model=list[FolderOut])
async def list_child_folders(folder_id: str, session: AsyncSession = Depends(get_session)):
    svc = FolderService(session)
    rows = await svc.list_children(folder_id)
    return [FolderOut.model_validate(r) for r in rows]


@router.put("/{folder_id}", response_model=FolderOut)
async def update_folder(folder_id: str, request: FolderIn, session: AsyncSession = Depends(get_session)):
    svc = FolderService(session)
    row = await svc.update(request.model_copy(update={"folder_id": folder_id}))
    return FolderOut.model_validate(row)


@router.delete("/{folder_id}", response_model=DeleteResponse)
async def delete_folder(folder_id: str, session: AsyncSession = Depends(get_session)):
    svc = FolderService(session)
    await svc.delete(folder_id)
    return DeleteResponse(ok=True, entity="folder", entity_id=folder_id)
