from urllib.parse import quote

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.capabilities import CapabilityRegistry
from dms_api.db.session import get_session
from dms_api.models import Document
from dms_api.ports.registry import get_capabilities
from dms_api.services.document_service import DocumentService


async def require_document(
    document_id: str,
    session: AsyncSession = Depends(get_session),
    capabilities: CapabilityRegistry = Depends(get_capabilities),
) -> Document:
    svc = DocumentService(session, capabilities)
    return await svc.get(document_id)


def download_headers(filename: str | None) -> dict[str, str]:
    quoted_name = quote(filename or "download.bin", safe="")
    return {
        "Content-Disposition": f"attachment; filename*=UTF-8''{quoted_name}",
        "X-Content-Type-Options": "nosniff",
    }
