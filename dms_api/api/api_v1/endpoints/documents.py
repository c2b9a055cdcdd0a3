from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import download_headers
from dms_api.core.capabilities import CapabilityRegistry
from dms_api.core.mime_utils import OCTET_STREAM
from dms_api.db.session import get_session
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.document import DocumentIn, DocumentOut
from dms_api.services.document_service import DocumentService

router = APIRouter(prefix="/documents")


@router.post("", response_model=DocumentOut)
async def create_document(
    request: DocumentIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    row = await svc.create(request)
    return DocumentOut.model_validate(row)


@router.get("", response_model=list[DocumentOut])
async def list_documents(
    folder_id: str | None = None,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    rows = await svc.list_documents(folder_id)
    return [DocumentOut.model_validate(r) for r in rows]


@router.get("/{document_id}", response_model=DocumentOut)
async def get_document(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    row = await svc.get(document_id)
    return DocumentOut.model_validate(row)


@router.put("/{document_id}", response_model=DocumentOut)
async def update_document(
    document_id: str,
    request: DocumentIn,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    row = await svc.update(request.model_copy(update={"document_id": document_id}))
    return DocumentOut.model_validate(row)


@router.delete("/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    await svc.delete(document_id)
    return DeleteResponse(ok=True, entity="document", entity_id=document_id)


@router.post("/{document_id}/content", response_model=DocumentOut)
async def upload_document_content(
    document_id: str,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    payload = await file.read()
    svc = DocumentService(session, capabilities)
    row = await svc.upload_content(
        document_id,
        filename=file.filename or "upload.bin",
        mime=file.content_type,
        payload=payload,
    )
    return DocumentOut.model_validate(row)


@router.get("/{document_id}/content")
async def download_document_content(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    row, stream = await svc.download_content(document_id)
    return StreamingResponse(stream, media_type=row.mime_type or OCTET_STREAM, headers=download_headers(row.file_name))


@router.get("/{document_id}/content/metadata", response_model=DocumentOut)
async def get_document_content_metadata(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentService(session, capabilities)
    row = await svc.get_content_metadata(document_id)
    return DocumentOut.model_validate(row)


@router.post("/{document_id}/versions", response_model=DocumentOut)
async def create_document_version(
    document_id: str,
    file: UploadFile = File(...),
    comment: str | None = Form(default=None),
    created_by: str | None = Form(default=None),
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    payload = await file.read()
    svc = DocumentService(session, capabilities)
    row = await svc.create_version(
        document_id,
        filename=file.filename or "upload.bin",
        mime=file.content_type,
        payload=payload,
        comment=comment,
        created_by=created_by,
    )
    return DocumentOut.model_validate(row)
