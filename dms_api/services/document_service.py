import hashlib
from collections.abc import AsyncIterator
from datetime import timedelta

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry, best_effort, require_capability
from dms_api.core.config import Settings, settings
from dms_api.core.errors import not_found
from dms_api.core.mime_utils import file_extension, resolve_upload_mime
from dms_api.core.status_mapping import DOCUMENT_STATUS
from dms_api.models import (
    Document,
    DocumentMetadata,
    DocumentPermission,
    DocumentSignature,
    DocumentStatus,
    DocumentTag,
    DocumentType,
    DocumentVersion,
    SecurityLevel,
    SignatureRequest,
    SignatureVerification,
    new_id,
    now_utc,
)
from dms_api.ports.base import EcmDocument, EcmDocumentVersion
from dms_api.ports.registry import get_capabilities
from dms_api.schemas.document import DocumentIn
from dms_api.services.entity_utils import apply_fields, reject_supplied_id, require_id

log = structlog.get_logger(__name__)

DEFAULT_VERSION_COMMENT = "Version created"

KEEP_WHEN_OMITTED = (
    "document_type",
    "document_status",
    "security_level",
    "file_name",
    "file_extension",
    "mime_type",
    "file_size",
    "checksum",
)


def to_ecm_document(row: Document) -> EcmDocument:
    return EcmDocument(
        id=row.document_id,
        name=row.name,
        description=row.description,
        mime_type=row.mime_type,
        extension=row.file_extension,
        size=row.file_size,
        storage_path=row.storage_path,
        checksum=row.checksum,
        version=row.version,
        status=DOCUMENT_STATUS.to_external(row.document_status),
        folder_id=row.folder_id,
        tenant_id=row.tenant_id,
        created_at=row.created_at,
        modified_at=row.updated_at,
        expires_at=row.expiration_date,
        encrypted=row.is_encrypted,
    )


class DocumentService:
    def __init__(self, session: AsyncSession, capabilities: CapabilityRegistry | None = None, config: Settings | None = None):
        self.session = session
        self.capabilities = capabilities or get_capabilities()
        self.config = config or settings

    async def get(self, document_id: str) -> Document:
        row = await self.session.get(Document, document_id)
        if not row:
            raise not_found("document", document_id)
        return row

    async def list_documents(self, folder_id: str | None = None) -> list[Document]:
        stmt = select(Document).order_by(Document.created_at.desc())
        if folder_id is not None:
            stmt = stmt.where(Document.folder_id == folder_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, data: DocumentIn) -> Document:
        reject_supplied_id(data.document_id, "document_id")
        defaults = self.config.tenant_defaults(data.tenant_id).document

        values = data.model_dump(exclude={"document_id"})
        values["document_type"] = data.document_type or DocumentType(defaults.document_type)
        values["security_level"] = data.security_level or SecurityLevel(defaults.security_level)
        values["document_status"] = data.document_status or DocumentStatus.DRAFT
        if values["file_extension"] is None:
            values["file_extension"] = file_extension(data.file_name)
        if values["retention_date"] is None:
            values["retention_date"] = now_utc() + timedelta(days=defaults.retention_days)

        row = Document(**values, version=0)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_created", document_id=row.document_id, tenant_id=row.tenant_id)
        return row

    async def update(self, data: DocumentIn) -> Document:
        document_id = require_id(data.document_id, "document_id")
        row = await self.get(document_id)

        values = data.model_dump(exclude={"document_id"})
        # Classifications and content-derived fields keep their stored value when omitted.
        for key in KEEP_WHEN_OMITTED:
            if values[key] is None:
                values.pop(key)
        apply_fields(row, values)

        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_updated", document_id=document_id)
        return row

    async def delete(self, document_id: str) -> None:
        row = await self.get(document_id)

        content = self.capabilities.content()
        if content is not None:
            await best_effort(
                CapabilityKind.CONTENT,
                "delete_content",
                lambda: content.delete_content(document_id),
                document_id=document_id,
            )

        signature_ids = select(DocumentSignature.signature_id).where(DocumentSignature.document_id == document_id)
        await self.session.execute(delete(SignatureVerification).where(SignatureVerification.signature_id.in_(signature_ids)))
        await self.session.execute(delete(SignatureRequest).where(SignatureRequest.signature_id.in_(signature_ids)))
        await self.session.execute(delete(DocumentSignature).where(DocumentSignature.document_id == document_id))
        await self.session.execute(delete(DocumentPermission).where(DocumentPermission.document_id == document_id))
        await self.session.execute(delete(DocumentVersion).where(DocumentVersion.document_id == document_id))
        await self.session.execute(delete(DocumentTag).where(DocumentTag.document_id == document_id))
        await self.session.execute(delete(DocumentMetadata).where(DocumentMetadata.document_id == document_id))
        await self.session.delete(row)
        await self.session.commit()

        search = self.capabilities.search()
        if search is not None:
            await best_effort(
                CapabilityKind.SEARCH,
                "remove_from_index",
                lambda: search.remove_from_index(document_id),
                document_id=document_id,
            )
        log.info("document_deleted", document_id=document_id)

    async def upload_content(self, document_id: str, filename: str, mime: str | None, payload: bytes) -> Document:
        row = await self.get(document_id)
        content = require_capability(self.capabilities.content(), CapabilityKind.CONTENT, "upload_content")

        resolved_mime = resolve_upload_mime(mime, filename)
        locator = await content.store_content(document_id, payload, resolved_mime)

        row.file_name = filename
        row.file_extension = file_extension(filename)
        row.mime_type = resolved_mime
        row.file_size = len(payload)
        row.checksum = hashlib.sha256(payload).hexdigest()
        row.storage_path = locator
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_content_uploaded", document_id=document_id, size=len(payload), mime=resolved_mime)

        await self._index(row)
        return row

    async def download_content(self, document_id: str) -> tuple[Document, AsyncIterator[bytes]]:
        row = await self.get(document_id)
        content = require_capability(self.capabilities.content(), CapabilityKind.CONTENT, "download_content")
        log.info("document_content_download", document_id=document_id)
        return row, content.get_content_stream(document_id)

    async def get_content_metadata(self, document_id: str) -> Document:
        return await self.get(document_id)

    async def create_version(
        self,
        document_id: str,
        filename: str,
        mime: str | None,
        payload: bytes,
        comment: str | None = None,
        created_by: str | None = None,
    ) -> Document:
        row = await self.get(document_id)
        next_number = (row.version or 0) + 1
        label = f"v{next_number}"
        resolved_mime = resolve_upload_mime(mime, filename)

        snapshot = DocumentVersion(
            version_id=new_id(),
            document_id=document_id,
            version_number=next_number,
            version_label=label,
            file_name=filename,
            file_extension=file_extension(filename),
            mime_type=resolved_mime,
            file_size=len(payload),
            is_encrypted=row.is_encrypted,
            change_summary=comment,
            is_major_version=False,
            tenant_id=row.tenant_id,
            created_by=created_by,
        )

        versions = self.capabilities.version()
        if versions is not None:
            created = await versions.create_version(
                EcmDocumentVersion(
                    id=snapshot.version_id,
                    document_id=document_id,
                    version_number=next_number,
                    version_label=label,
                    comment=comment or DEFAULT_VERSION_COMMENT,
                    size=len(payload),
                    mime_type=resolved_mime,
                    created_at=now_utc(),
                    changes_summary=comment,
                ),
                payload,
            )
            snapshot.storage_path = created.storage_path
            row.storage_path = created.storage_path
            row.checksum = hashlib.sha256(payload).hexdigest()
        else:
            log.warning("version_recorded_locally", document_id=document_id, version_number=next_number)

        row.version = next_number
        row.file_name = filename
        row.file_extension = snapshot.file_extension
        row.mime_type = resolved_mime
        row.file_size = len(payload)
        if created_by is not None:
            row.updated_by = created_by

        self.session.add(snapshot)
        await self.session.commit()
        await self.session.refresh(row)
        log.info("document_version_created", document_id=document_id, version_number=next_number)

        await self._index(row)
        return row

    async def _index(self, row: Document) -> None:
        search = self.capabilities.search()
        if search is None:
            return
        outcome = await best_effort(
            CapabilityKind.SEARCH,
            "index_document",
            lambda: search.index_document(to_ecm_document(row)),
            document_id=row.document_id,
        )
        if outcome.ok and not row.is_indexed:
            row.is_indexed = True
            await self.session.commit()
            await self.session.refresh(row)
