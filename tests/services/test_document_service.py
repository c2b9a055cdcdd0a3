from datetime import datetime, timezone

import pytest
from fastapi import HTTPException
from sqlalchemy import select

from dms_api.core.capabilities import CapabilityKind, CapabilityRegistry
from dms_api.core.config import Settings
from dms_api.models import DocumentMetadata, DocumentStatus, DocumentType, SecurityLevel
from dms_api.ports.base import EcmDocumentStatus
from dms_api.ports.local_fs import LocalFsContentStore, LocalFsVersionStore
from dms_api.schemas.document import DocumentIn
from dms_api.schemas.metadata import DocumentMetadataIn
from dms_api.schemas.permission import PermissionIn
from dms_api.schemas.signature import SignatureIn
from dms_api.schemas.tag import DocumentTagIn, TagIn
from dms_api.services.document_service import DocumentService
from dms_api.services.document_version_service import DocumentVersionService
from dms_api.services.metadata_service import DocumentMetadataService
from dms_api.services.permission_service import PermissionService
from dms_api.services.signature_service import SignatureService
from dms_api.services.tag_service import DocumentTagService, TagService
from tests.fakes import FakeEcm


async def _document(session, registry, **fields):
    svc = DocumentService(session, registry)
    return await svc.create(DocumentIn(name=fields.pop("name", "contract"), **fields))


async def test_create_applies_tenant_defaults(session, empty_registry):
    config = Settings(tenant_overrides={"acme": {"document": {"security_level": "CONFIDENTIAL"}}})
    svc = DocumentService(session, empty_registry, config)
    row = await svc.create(DocumentIn(name="nda", file_name="nda.PDF", tenant_id="acme"))

    assert row.document_status == DocumentStatus.DRAFT
    assert row.document_type == DocumentType.DOCUMENT
    assert row.security_level == SecurityLevel.CONFIDENTIAL
    assert row.file_extension == "pdf"
    assert row.version == 0
    assert row.retention_date is not None


async def test_create_rejects_supplied_id(session, empty_registry):
    svc = DocumentService(session, empty_registry)
    with pytest.raises(HTTPException) as exc:
        await svc.create(DocumentIn(document_id="chosen", name="x"))
    assert exc.value.status_code == 400
    assert exc.value.detail["code"] == "invalid_argument"


async def test_get_missing_document_is_not_found(session, empty_registry):
    svc = DocumentService(session, empty_registry)
    with pytest.raises(HTTPException) as exc:
        await svc.get("missing")
    assert exc.value.status_code == 404
    assert exc.value.detail["code"] == "document_not_found"


async def test_update_requires_identity_and_preserves_creation_audit(session, empty_registry):
    svc = DocumentService(session, empty_registry)
    row = await svc.create(DocumentIn(name="draft", created_by="alice"))
    created_at = row.created_at

    with pytest.raises(HTTPException) as exc:
        await svc.update(DocumentIn(name="renamed"))
    assert exc.value.detail["code"] == "invalid_argument"

    updated = await svc.update(
        DocumentIn(document_id=row.document_id, name="renamed", created_by="mallory", updated_by="bob")
    )
    assert updated.name == "renamed"
    assert updated.created_by == "alice"
    assert updated.created_at == created_at
    assert updated.updated_by == "bob"
    assert updated.document_type == DocumentType.DOCUMENT


async def test_upload_stores_content_and_indexes(session, provider, registry):
    row = await _document(session, registry)
    svc = DocumentService(session, registry)
    updated = await svc.upload_content(row.document_id, "scan.pdf", None, b"%PDF-1.7 data")

    assert updated.storage_path == f"fake://content/{row.document_id}"
    assert updated.mime_type == "application/pdf"
    assert updated.file_size == 13
    assert updated.file_extension == "pdf"
    assert updated.is_indexed is True
    indexed = provider.arguments("index_document")[-1]
    assert indexed.id == row.document_id
    assert indexed.status == EcmDocumentStatus.CREATING


async def test_upload_without_content_capability_changes_nothing(session):
    registry = CapabilityRegistry()
    row = await _document(session, registry)
    svc = DocumentService(session, registry)

    with pytest.raises(HTTPException) as exc:
        await svc.upload_content(row.document_id, "a.txt", "text/plain", b"abc")
    assert exc.value.status_code == 424
    assert exc.value.detail["detail"]["capability"] == "content"

    stored = await svc.get(row.document_id)
    assert stored.storage_path is None
    assert stored.file_size is None


async def test_upload_survives_index_failure(session):
    provider = FakeEcm(failing={"index_document"})
    registry = CapabilityRegistry({CapabilityKind.CONTENT: provider, CapabilityKind.SEARCH: provider})
    row = await _document(session, registry)

    updated = await DocumentService(session, registry).upload_content(row.document_id, "a.txt", "text/plain", b"abc")
    assert updated.storage_path == f"fake://content/{row.document_id}"
    assert updated.is_indexed is False


async def test_download_streams_content(session, registry):
    row = await _document(session, registry)
    svc = DocumentService(session, registry)
    await svc.upload_content(row.document_id, "a.txt", "text/plain", b"0123456789")

    doc, stream = await svc.download_content(row.document_id)
    assert doc.mime_type == "text/plain"
    assert b"".join([chunk async for chunk in stream]) == b"0123456789"


async def test_download_requires_content_capability(session, empty_registry):
    row = await _document(session, empty_registry)
    with pytest.raises(HTTPException) as exc:
        await DocumentService(session, empty_registry).download_content(row.document_id)
    assert exc.value.status_code == 424


async def test_create_version_through_version_capability(session, provider, registry):
    row = await _document(session, registry)
    svc = DocumentService(session, registry)

    first = await svc.create_version(row.document_id, "v1.txt", "text/plain", b"one", comment="first draft")
    assert first.version == 1
    assert first.storage_path == f"fake://versions/{row.document_id}/1"
    descriptor = provider.arguments("create_version")[0]
    assert descriptor.version_label == "v1"
    assert descriptor.comment == "first draft"
    assert descriptor.current is True
    assert descriptor.major_version is False

    second = await svc.create_version(row.document_id, "v2.txt", "text/plain", b"two")
    assert second.version == 2
    assert provider.arguments("create_version")[1].comment == "Version created"

    versions = await DocumentVersionService(session, registry).list_versions(row.document_id)
    assert [v.version_number for v in versions] == [2, 1]
    assert versions[1].change_summary == "first draft"


async def test_create_version_without_capability_keeps_storage_locator(session, empty_registry):
    row = await _document(session, empty_registry)
    svc = DocumentService(session, empty_registry)

    updated = await svc.create_version(row.document_id, "v1.txt", "text/plain", b"one")
    assert updated.version == 1
    assert updated.storage_path is None
    versions = await DocumentVersionService(session, empty_registry).list_versions(row.document_id)
    assert len(versions) == 1
    assert versions[0].version_label == "v1"


async def test_filesystem_backends_serve_latest_version_content(session, tmp_path):
    registry = CapabilityRegistry(
        {
            CapabilityKind.CONTENT: LocalFsContentStore(tmp_path),
            CapabilityKind.VERSION: LocalFsVersionStore(tmp_path),
        }
    )
    row = await _document(session, registry)
    svc = DocumentService(session, registry)
    await svc.upload_content(row.document_id, "a.txt", "text/plain", b"OLD-CONTENT")

    updated = await svc.create_version(row.document_id, "b.txt", "text/plain", b"NEW")
    assert updated.file_name == "b.txt"
    assert updated.file_size == 3

    _, stream = await svc.download_content(row.document_id)
    assert b"".join([chunk async for chunk in stream]) == b"NEW"

    versions = DocumentVersionService(session, registry)
    (only,) = await versions.list_versions(row.document_id)
    assert only.storage_path == f"file://content/{only.version_id}"
    _, stream = await versions.download_version_content(only.version_id)
    assert b"".join([chunk async for chunk in stream]) == b"NEW"

    await versions.delete_version(only.version_id)
    assert not (tmp_path / "content" / only.version_id).exists()


async def test_version_creation_failure_leaves_counter(session):
    provider = FakeEcm(failing={"create_version"})
    registry = CapabilityRegistry({CapabilityKind.VERSION: provider})
    row = await _document(session, registry)

    with pytest.raises(RuntimeError):
        await DocumentService(session, registry).create_version(row.document_id, "v1.txt", "text/plain", b"one")
    await session.rollback()
    assert (await DocumentService(session, registry).get(row.document_id)).version == 0


async def test_delete_version_never_reuses_numbers(session, provider, registry):
    row = await _document(session, registry)
    svc = DocumentService(session, registry)
    await svc.create_version(row.document_id, "v1.txt", "text/plain", b"one")
    versions = DocumentVersionService(session, registry)
    (only,) = await versions.list_versions(row.document_id)

    await versions.delete_version(only.version_id)
    assert provider.arguments("delete_version") == [only.version_id]

    again = await svc.create_version(row.document_id, "v2.txt", "text/plain", b"two")
    assert again.version == 2


async def test_delete_removes_children_even_when_provider_fails(session):
    provider = FakeEcm(failing={"delete_content", "remove_from_index"})
    registry = CapabilityRegistry({kind: provider for kind in CapabilityKind})
    row = await _document(session, registry)
    await PermissionService(session, registry).create(
        PermissionIn(document_id=row.document_id, party_id="p-1", permission_type="READ")
    )
    await SignatureService(session, registry).initiate_signing_process(
        SignatureIn(document_id=row.document_id, signer_email="a@example.com"),
        now=datetime.now(timezone.utc),
    )

    svc = DocumentService(session, registry)
    await svc.delete(row.document_id)

    assert {"delete_content", "remove_from_index"} <= set(provider.operations())
    with pytest.raises(HTTPException):
        await svc.get(row.document_id)
    assert await PermissionService(session, registry).list_for_document(row.document_id) == []
    assert await SignatureService(session, registry).list_for_document(row.document_id) == []


async def test_delete_removes_tag_links_and_metadata(session, empty_registry):
    row = await _document(session, empty_registry)
    tag = await TagService(session).create(TagIn(name="hr"))
    await DocumentTagService(session).create(DocumentTagIn(document_id=row.document_id, tag_id=tag.tag_id))
    await DocumentMetadataService(session).create(DocumentMetadataIn(document_id=row.document_id, key="owner"))

    await DocumentService(session, empty_registry).delete(row.document_id)

    assert await DocumentTagService(session).list_for_tag(tag.tag_id) == []
    assert (await session.execute(select(DocumentMetadata))).scalars().all() == []
