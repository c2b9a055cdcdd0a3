import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.errors import invalid_argument, not_found
from dms_api.models import Document, DocumentTag, Tag
from dms_api.schemas.tag import DocumentTagIn, TagIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)


class TagService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, tag_id: str) -> Tag:
        row = await self.session.get(Tag, tag_id)
        if not row:
            raise not_found("tag", tag_id)
        return row

    async def list_tags(self, tenant_id: str | None = None) -> list[Tag]:
        stmt = select(Tag).order_by(Tag.name)
        if tenant_id is not None:
            stmt = stmt.where(Tag.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: TagIn) -> Tag:
        reject_supplied_id(data.tag_id, "tag_id")
        row = Tag(**data.model_dump(exclude={"tag_id"}))
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("tag_created", tag_id=row.tag_id, name=row.name)
        return row

    async def update(self, data: TagIn) -> Tag:
        tag_id = require_id(data.tag_id, "tag_id")
        row = await self.get(tag_id)
        apply_fields(row, data.model_dump(exclude={"tag_id"}))
        await self.session.commit()
        await self.session.refresh(row)
        log.info("tag_updated", tag_id=tag_id)
        return row

    async def delete(self, tag_id: str) -> None:
        row = await self.get(tag_id)
        if row.is_system_tag:
            raise invalid_argument("System tags cannot be deleted", {"tag_id": tag_id})
        await self.session.execute(delete(DocumentTag).where(DocumentTag.tag_id == tag_id))
        await self.session.delete(row)
        await self.session.commit()
        log.info("tag_deleted", tag_id=tag_id)


class DocumentTagService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, document_tag_id: str) -> DocumentTag:
        row = await self.session.get(DocumentTag, document_tag_id)
        if not row:
            raise not_found("document_tag", document_tag_id)
        return row

    async def list_for_document(self, document_id: str) -> list[DocumentTag]:
        if not await self.session.get(Document, document_id):
            raise not_found("document", document_id)
        stmt = select(DocumentTag).where(DocumentTag.document_id == document_id).order_by(DocumentTag.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_tag(self, tag_id: str) -> list[DocumentTag]:
        await TagService(self.session).get(tag_id)
        stmt = select(DocumentTag).where(DocumentTag.tag_id == tag_id).order_by(DocumentTag.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _check_link(self, data: DocumentTagIn, document_tag_id: str | None = None) -> None:
        if not await self.session.get(Document, data.document_id):
            raise not_found("document", data.document_id)
        await TagService(self.session).get(data.tag_id)

        stmt = select(DocumentTag.document_tag_id).where(
            DocumentTag.document_id == data.document_id,
            DocumentTag.tag_id == data.tag_id,
        )
        existing = (await self.session.execute(stmt)).scalars().first()
        if existing is not None and existing != document_tag_id:
            raise invalid_argument(
                "Tag is already attached to the document",
                {"document_id": data.document_id, "tag_id": data.tag_id, "document_tag_id": existing},
            )

    async def create(self, data: DocumentTagIn) -> DocumentTag:
        reject_supplied_id(data.document_tag_id, "document_tag_id")
        await self._check_link(data)

        row = DocumentTag(**data.model_dump(exclude={"document_tag_id"}))
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_tag_created", document_tag_id=row.document_tag_id, document_id=row.document_id, tag_id=row.tag_id)
        return row

    async def update(self, data: DocumentTagIn) -> DocumentTag:
        document_tag_id = require_id(data.document_tag_id, "document_tag_id")
        row = await self.get(document_tag_id)
        await self._check_link(data, document_tag_id)

        apply_fields(row, data.model_dump(exclude={"document_tag_id"}))
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_tag_updated", document_tag_id=document_tag_id)
        return row

    async def delete(self, document_tag_id: str) -> None:
        row = await self.get(document_tag_id)
        await self.session.delete(row)
        await self.session.commit()
        log.info("document_tag_deleted", document_tag_id=document_tag_id)
