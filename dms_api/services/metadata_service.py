import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.errors import not_found
from dms_api.models import Document, DocumentMetadata
from dms_api.schemas.metadata import DocumentMetadataIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)


class DocumentMetadataService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, metadata_id: str) -> DocumentMetadata:
        row = await self.session.get(DocumentMetadata, metadata_id)
        if not row:
            raise not_found("document_metadata", metadata_id)
        return row

    async def list_for_document(self, document_id: str) -> list[DocumentMetadata]:
        if not await self.session.get(Document, document_id):
            raise not_found("document", document_id)
        stmt = select(DocumentMetadata).where(DocumentMetadata.document_id == document_id).order_by(DocumentMetadata.key)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: DocumentMetadataIn) -> DocumentMetadata:
        reject_supplied_id(data.metadata_id, "metadata_id")
        if not await self.session.get(Document, data.document_id):
            raise not_found("document", data.document_id)

        row = DocumentMetadata(**data.model_dump(exclude={"metadata_id"}))
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_metadata_created", metadata_id=row.metadata_id, document_id=row.document_id, key=row.key)
        return row

    async def update(self, data: DocumentMetadataIn) -> DocumentMetadata:
        metadata_id = require_id(data.metadata_id, "metadata_id")
        row = await self.get(metadata_id)
        if data.document_id != row.document_id and not await self.session.get(Document, data.document_id):
            raise not_found("document", data.document_id)

        apply_fields(row, data.model_dump(exclude={"metadata_id"}))
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_metadata_updated", metadata_id=metadata_id)
        return row

    async def delete(self, metadata_id: str) -> None:
        row = await self.get(metadata_id)
        await self.session.delete(row)
        await self.session.commit()
        log.info("document_metadata_deleted", metadata_id=metadata_id, document_id=row.document_id, key=row.key)
