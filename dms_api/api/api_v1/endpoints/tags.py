from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import require_document
from dms_api.db.session import get_session
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.tag import DocumentTagIn, DocumentTagOut, TagIn, TagOut
from dms_api.services.tag_service import DocumentTagService, TagService

router = APIRouter()


@router.post("/tags", response_model=TagOut)
async def create_tag(request: TagIn, session: AsyncSession = Depends(get_session)):
    svc = TagService(session)
    row = await svc.create(request)
    return TagOut.model_validate(row)


@router.get("/tags", response_model=list[TagOut])
async def list_tags(tenant_id: str | None = None, session: AsyncSession = Depends(get_session)):
    svc = TagService(session)
    rows = await svc.list_tags(tenant_id)
    return [TagOut.model_validate(r) for r in rows]


@router.get("/tags/{tag_id}", response_model=TagOut)
async def get_tag(tag_id: str, session: AsyncSession = Depends(get_session)):
    svc = TagService(session)
    row = await svc.get(tag_id)
    return TagOut.model_validate(row)


@router.put("/tags/{tag_id}", response_model=TagOut)
async def update_tag(tag_id: str, request: TagIn, session: AsyncSession = Depends(get_session)):
    svc = TagService(session)
    row = await svc.update(request.model_copy(update={"tag_id": tag_id}))
    return TagOut.model_validate(row)


@router.delete("/tags/{tag_id}", response_model=DeleteResponse)
async def delete_tag(tag_id: str, session: AsyncSession = Depends(get_session)):
    svc = TagService(session)
    await svc.delete(tag_id)
    return DeleteResponse(ok=True, entity="tag", entity_id=tag_id)


@router.get("/tags/{tag_id}/documents", response_model=list[DocumentTagOut])
async def list_tagged_documents(tag_id: str, session: AsyncSession = Depends(get_session)):
    svc = DocumentTagService(session)
    rows = await svc.list_for_tag(tag_id)
    return [DocumentTagOut.model_validate(r) for r in rows]


@router.post("/document_tags", response_model=DocumentTagOut)
async def create_document_tag(request: DocumentTagIn, session: AsyncSession = Depends(get_session)):
    svc = DocumentTagService(session)
    row = await svc.create(request)
    return DocumentTagOut.model_validate(row)


@router.get("/document_tags/{document_tag_id}", response_model=DocumentTagOut)
async def get_document_tag(document_tag_id: str, session: AsyncSession = Depends(get_session)):
    svc = DocumentTagService(session)
    row = await svc.get(document_tag_id)
    return DocumentTagOut.model_validate(row)


@router.put("/document_tags/{document_tag_id}", response_model=DocumentTagOut)
async def update_document_tag(
    document_tag_id: str,
    request: DocumentTagIn,
    session: AsyncSession = Depends(get_session),
):
    svc = DocumentTagService(session)
    row = await svc.update(request.model_copy(update={"document_tag_id": document_tag_id}))
    return DocumentTagOut.model_validate(row)


@router.delete("/document_tags/{document_tag_id}", response_model=DeleteResponse)
async def delete_document_tag(document_tag_id: str, session: AsyncSession = Depends(get_session)):
    svc = DocumentTagService(session)
    await svc.delete(document_tag_id)
    return DeleteResponse(ok=True, entity="document_tag", entity_id=document_tag_id)


@router.get("/documents/{document_id}/tags", response_model=list[DocumentTagOut])
async def list_document_tags(
    document_id: str,
    _document=Depends(require_document),
    session: AsyncSession = Depends(get_session),
):
    svc = DocumentTagService(session)
    rows = await svc.list_for_document(document_id)
    return [DocumentTagOut.model_validate(r) for r in rows]
