import io


def _create_document(client) -> str:
    resp = client.post("/api/v1/documents", json={"name": "guarded"})
    assert resp.status_code == 200, resp.text
    return resp.json()["document_id"]


def test_content_operations_require_content_capability(bare_client):
    document_id = _create_document(bare_client)

    upload = bare_client.post(
        f"/api/v1/documents/{document_id}/content",
        files={"file": ("a.txt", io.BytesIO(b"abc"), "text/plain")},
    )
    assert upload.status_code == 424, upload.text
    assert upload.json()["detail"]["code"] == "capability_unavailable"
    assert upload.json()["detail"]["detail"]["capability"] == "content"

    download = bare_client.get(f"/api/v1/documents/{document_id}/content")
    assert download.status_code == 424, download.text

    doc = bare_client.get(f"/api/v1/documents/{document_id}")
    assert doc.json()["storage_path"] is None


def test_permission_check_requires_permission_capability(bare_client):
    document_id = _create_document(bare_client)
    resp = bare_client.get(
        f"/api/v1/documents/{document_id}/permissions/check",
        params={"party_id": "user-1", "permission_type": "READ"},
    )
    assert resp.status_code == 424, resp.text
    assert resp.json()["detail"]["detail"]["capability"] == "permission"


def test_tolerated_operations_work_without_capabilities(bare_client):
    document_id = _create_document(bare_client)

    version = bare_client.post(
        f"/api/v1/documents/{document_id}/versions",
        files={"file": ("v1.txt", io.BytesIO(b"one"), "text/plain")},
    )
    assert version.status_code == 200, version.text
    assert version.json()["version"] == 1
    assert version.json()["storage_path"] is None

    permission = bare_client.post(
        "/api/v1/permissions",
        json={"document_id": document_id, "party_id": "user-1", "permission_type": "WRITE"},
    )
    assert permission.status_code == 200, permission.text

    signature = bare_client.post("/api/v1/signatures", json={"document_id": document_id})
    assert signature.status_code == 200, signature.text
    signature_id = signature.json()["signature_id"]
    assert signature.json()["external_signer_id"] is None

    cancel = bare_client.post(f"/api/v1/signatures/{signature_id}/cancel")
    assert cancel.status_code == 200, cancel.text
    assert cancel.json()["signature_status"] == "CANCELED"

    deleted = bare_client.delete(f"/api/v1/documents/{document_id}")
    assert deleted.status_code == 200, deleted.text


def test_health_reports_no_capabilities_when_unconfigured(bare_client):
    resp = bare_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "capabilities": []}
