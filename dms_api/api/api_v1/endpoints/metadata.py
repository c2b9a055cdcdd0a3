from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import require_document
from dms_api.db.session import get_session
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.metadata import DocumentMetadataIn, DocumentMetadataOut
from dms_api.services.metadata_service import DocumentMetadataService

router = APIRouter()


@router.post("/metadata", response_model=DocumentMetadataOut)
async def create_metadata(request: DocumentMetadataIn, session: AsyncSession = Depends(get_session)):
    svc = DocumentMetadataService(session)
    row = await svc.create(request)
    return DocumentMetadataOut.model_validate(row)


@router.get("/metadata/{metadata_id}", response_model=DocumentMetadataOut)
async def get_metadata(metadata_id: str, session: AsyncSession = Depends(get_session)):
    svc = DocumentMetadataService(session)
    row = await svc.get(metadata_id)
    return DocumentMetadataOut.model_validate(row)


@router.put("/metadata/{metadata_id}", response_model=DocumentMetadataOut)
async def update_metadata(
    metadata_id: str,
    request: DocumentMetadataIn,
    session: AsyncSession = Depends(get_session),
):
    svc = DocumentMetadataService(session)
    row = await svc.update(request.model_copy(update={"metadata_id": metadata_id}))
    return DocumentMetadataOut.model_validate(row)


@router.delete("/metadata/{metadata_id}", response_model=DeleteResponse)
async def delete_metadata(metadata_id: str, session: AsyncSession = Depends(get_session)):
    svc = DocumentMetadataService(session)
    await svc.delete(metadata_id)
    return DeleteResponse(ok=True, entity="document_metadata", entity_id=metadata_id)


@router.get("/documents/{document_id}/metadata", response_model=list[DocumentMetadataOut])
async def list_document_metadata(
    document_id: str,
    _document=Depends(require_document),
    session: AsyncSession = Depends(get_session),
):
    svc = DocumentMetadataService(session)
    rows = await svc.list_for_document(document_id)
    return [DocumentMetadataOut.model_validate(r) for r in rows]
