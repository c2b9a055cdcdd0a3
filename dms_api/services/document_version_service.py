import hashlib
from collections.abc import AsyncIterator

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry, best_effort, require_capability
from dms_api.core.errors import not_found
from dms_api.core.mime_utils import file_extension, resolve_upload_mime
from dms_api.models import Document, DocumentVersion
from dms_api.ports.registry import get_capabilities

log = structlog.get_logger(__name__)


class DocumentVersionService:
    def __init__(self, session: AsyncSession, capabilities: CapabilityRegistry | None = None):
        self.session = session
        self.capabilities = capabilities or get_capabilities()

    async def list_versions(self, document_id: str) -> list[DocumentVersion]:
        if not await self.session.get(Document, document_id):
            raise not_found("document", document_id)
        stmt = (
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_number.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_version(self, version_id: str) -> DocumentVersion:
        row = await self.session.get(DocumentVersion, version_id)
        if not row:
            raise not_found("document_version", version_id)
        return row

    async def get_version_content_metadata(self, version_id: str) -> DocumentVersion:
        return await self.get_version(version_id)

    async def upload_version_content(self, version_id: str, filename: str, mime: str | None, payload: bytes) -> DocumentVersion:
        row = await self.get_version(version_id)
        content = require_capability(self.capabilities.content(), CapabilityKind.CONTENT, "upload_version_content")

        resolved_mime = resolve_upload_mime(mime, filename)
        row.storage_path = await content.store_content(version_id, payload, resolved_mime)
        row.file_name = filename
        row.file_extension = file_extension(filename)
        row.mime_type = resolved_mime
        row.file_size = len(payload)
        await self.session.commit()
        await self.session.refresh(row)
        log.info(
            "document_version_content_uploaded",
            version_id=version_id,
            document_id=row.document_id,
            checksum=hashlib.sha256(payload).hexdigest(),
        )
        return row

    async def download_version_content(self, version_id: str) -> tuple[DocumentVersion, AsyncIterator[bytes]]:
        row = await self.get_version(version_id)
        content = require_capability(self.capabilities.content(), CapabilityKind.CONTENT, "download_version_content")
        return row, content.get_content_stream(version_id)

    async def delete_version(self, version_id: str) -> None:
        row = await self.get_version(version_id)

        versions = self.capabilities.version()
        if versions is not None:
            await best_effort(
                CapabilityKind.VERSION,
                "delete_version",
                lambda: versions.delete_version(version_id),
                version_id=version_id,
                document_id=row.document_id,
            )

        # The owning document's counter is left alone; version numbers are never reused.
        await self.session.delete(row)
        await self.session.commit()
        log.info("document_version_deleted", version_id=version_id, document_id=row.document_id)
