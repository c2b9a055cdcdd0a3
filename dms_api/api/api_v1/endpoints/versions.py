from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.api.api_v1.deps import download_headers
from dms_api.core.capabilities import CapabilityRegistry
from dms_api.core.mime_utils import OCTET_STREAM
from dms_api.db.session import get_session
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.common import DeleteResponse
from dms_api.schemas.document import DocumentVersionOut
from dms_api.services.document_version_service import DocumentVersionService

router = APIRouter()


@router.get("/documents/{document_id}/versions", response_model=list[DocumentVersionOut])
async def list_document_versions(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentVersionService(session, capabilities)
    rows = await svc.list_versions(document_id)
    return [DocumentVersionOut.model_validate(r) for r in rows]


@router.get("/document_versions/{version_id}", response_model=DocumentVersionOut)
async def get_document_version(
    version_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentVersionService(session, capabilities)
    row = await svc.get_version(version_id)
    return DocumentVersionOut.model_validate(row)


@router.get("/document_versions/{version_id}/content/metadata", response_model=DocumentVersionOut)
async def get_document_version_content_metadata(
    version_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentVersionService(session, capabilities)
    row = await svc.get_version_content_metadata(version_id)
    return DocumentVersionOut.model_validate(row)


@router.post("/document_versions/{version_id}/content", response_model=DocumentVersionOut)
async def upload_document_version_content(
    version_id: str,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    payload = await file.read()
    svc = DocumentVersionService(session, capabilities)
    row = await svc.upload_version_content(
        version_id,
        filename=file.filename or "upload.bin",
        mime=file.content_type,
        payload=payload,
    )
    return DocumentVersionOut.model_validate(row)


@router.get("/document_versions/{version_id}/content")
async def download_document_version_content(
    version_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentVersionService(session, capabilities)
    row, stream = await svc.download_version_content(version_id)
    return StreamingResponse(stream, media_type=row.mime_type or OCTET_STREAM, headers=download_headers(row.file_name))


@router.delete("/document_versions/{version_id}", response_model=DeleteResponse)
async def delete_document_version(
    version_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
):
    svc = DocumentVersionService(session, capabilities)
    await svc.delete_version(version_id)
    return DeleteResponse(ok=True, entity="document_version", entity_id=version_id)
