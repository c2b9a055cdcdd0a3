import pytest
from fastapi import HTTPException

from dms_api.schemas.document import DocumentIn
from dms_api.schemas.metadata import DocumentMetadataIn
from dms_api.services.document_service import DocumentService
from dms_api.services.metadata_service import DocumentMetadataService


async def test_metadata_crud_preserves_creation_audit(session, empty_registry):
    document = await DocumentService(session, empty_registry).create(DocumentIn(name="report"))
    svc = DocumentMetadataService(session)

    row = await svc.create(
        DocumentMetadataIn(document_id=document.document_id, key="department", value="legal", created_by="alice")
    )
    created_at = row.created_at

    with pytest.raises(HTTPException) as exc:
        await svc.create(DocumentMetadataIn(metadata_id="chosen", document_id=document.document_id, key="k"))
    assert exc.value.detail["code"] == "invalid_argument"

    updated = await svc.update(
        DocumentMetadataIn(
            metadata_id=row.metadata_id,
            document_id=document.document_id,
            key="department",
            value="finance",
            created_by="mallory",
            updated_by="bob",
        )
    )
    assert updated.value == "finance"
    assert updated.created_by == "alice"
    assert updated.created_at == created_at
    assert updated.updated_by == "bob"

    assert [m.key for m in await svc.list_for_document(document.document_id)] == ["department"]

    await svc.delete(row.metadata_id)
    with pytest.raises(HTTPException) as exc:
        await svc.delete(row.metadata_id)
    assert exc.value.status_code == 404
    assert exc.value.detail["code"] == "document_metadata_not_found"


async def test_metadata_for_missing_document_is_not_found(session):
    svc = DocumentMetadataService(session)
    with pytest.raises(HTTPException) as exc:
        await svc.create(DocumentMetadataIn(document_id="missing", key="k"))
    assert exc.value.detail["code"] == "document_not_found"

    with pytest.raises(HTTPException) as exc:
        await svc.list_for_document("missing")
    assert exc.value.detail["code"] == "document_not_found"
