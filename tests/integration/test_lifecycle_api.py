import io


def _create_document(client, name: str = "contract", **fields) -> dict:
    resp = client.post("/api/v1/documents", json={"name": name, **fields})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_document_content_and_version_lifecycle(client, provider):
    folder = client.post("/api/v1/folders", json={"name": "legal"})
    assert folder.status_code == 200, folder.text
    folder_id = folder.json()["folder_id"]
    assert folder.json()["path"] == "/legal"

    doc = _create_document(client, folder_id=folder_id)
    document_id = doc["document_id"]
    assert doc["document_status"] == "DRAFT"
    assert doc["version"] == 0

    listed = client.get("/api/v1/documents", params={"folder_id": folder_id})
    assert [d["document_id"] for d in listed.json()] == [document_id]

    files = {"file": ("notes.txt", io.BytesIO(b"alpha beta gamma"), "text/plain")}
    upload = client.post(f"/api/v1/documents/{document_id}/content", files=files)
    assert upload.status_code == 200, upload.text
    assert upload.json()["storage_path"] == f"fake://content/{document_id}"
    assert upload.json()["mime_type"] == "text/plain"
    assert upload.json()["file_size"] == 16

    download = client.get(f"/api/v1/documents/{document_id}/content")
    assert download.status_code == 200, download.text
    assert download.content == b"alpha beta gamma"
    assert download.headers["content-type"].startswith("text/plain")
    assert "notes.txt" in download.headers["content-disposition"]

    version = client.post(
        f"/api/v1/documents/{document_id}/versions",
        data={"comment": "second pass"},
        files={"file": ("notes-v2.txt", io.BytesIO(b"alpha beta"), "text/plain")},
    )
    assert version.status_code == 200, version.text
    assert version.json()["version"] == 1

    versions = client.get(f"/api/v1/documents/{document_id}/versions")
    assert versions.status_code == 200, versions.text
    (only,) = versions.json()
    assert only["version_label"] == "v1"
    assert only["change_summary"] == "second pass"

    metadata = client.get(f"/api/v1/document_versions/{only['version_id']}/content/metadata")
    assert metadata.json()["file_name"] == "notes-v2.txt"

    updated = client.put(
        f"/api/v1/documents/{document_id}",
        json={"name": "contract-final", "document_status": "PUBLISHED"},
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["document_status"] == "PUBLISHED"
    assert updated.json()["storage_path"] == version.json()["storage_path"]

    deleted = client.delete(f"/api/v1/documents/{document_id}")
    assert deleted.status_code == 200, deleted.text
    assert deleted.json() == {"ok": True, "entity": "document", "entity_id": document_id}
    assert client.get(f"/api/v1/documents/{document_id}").status_code == 404
    assert "remove_from_index" in provider.operations()


def test_signature_workflow_over_http(client, provider):
    document_id = _create_document(client)["document_id"]

    signature = client.post(
        "/api/v1/signatures",
        json={"document_id": document_id, "signer_email": "s@example.com", "signer_party_id": "party-9"},
    )
    assert signature.status_code == 200, signature.text
    signature_id = signature.json()["signature_id"]
    assert signature.json()["signature_status"] == "PENDING"
    assert signature.json()["external_signer_id"] == f"ext-{signature_id}"

    status = client.get(f"/api/v1/documents/{document_id}/signing-status")
    assert status.json() == {"document_id": document_id, "fully_signed": False}

    requests = client.get("/api/v1/signature_requests", params={"signature_id": signature_id})
    (tracking,) = requests.json()
    notify = client.post(f"/api/v1/signature_requests/{tracking['request_id']}/notify")
    assert notify.status_code == 200, notify.text
    assert notify.json()["notification_sent"] is True

    report = client.post(
        "/api/v1/signature_requests/provider-status",
        json={"request_reference": tracking["request_reference"], "external_status": "SIGNED"},
    )
    assert report.status_code == 200, report.text
    assert report.json()["request_status"] == "SIGNED"

    status = client.get(f"/api/v1/documents/{document_id}/signing-status")
    assert status.json()["fully_signed"] is True

    by_signer = client.get("/api/v1/signatures", params={"signer_party_id": "party-9"})
    assert [s["signature_id"] for s in by_signer.json()] == [signature_id]

    verification = client.post(f"/api/v1/signatures/{signature_id}/verify")
    assert verification.status_code == 200, verification.text
    assert verification.json()["verification_status"] == "VALID"

    latest = client.get(f"/api/v1/signatures/{signature_id}/verifications/latest")
    assert latest.json()["verification_id"] == verification.json()["verification_id"]

    cancel = client.post(f"/api/v1/signatures/{signature_id}/cancel")
    assert cancel.status_code == 409, cancel.text
    assert cancel.json()["detail"]["code"] == "illegal_state"


def test_signature_validation_errors_are_listed(client):
    document_id = _create_document(client)["document_id"]
    resp = client.post(
        "/api/v1/signatures",
        json={"document_id": document_id, "signer_role": "Boss", "signing_order": 0},
    )
    assert resp.status_code == 422, resp.text
    payload = resp.json()["detail"]
    assert payload["code"] == "validation_failed"
    assert len(payload["detail"]["errors"]) == 2


def test_permission_endpoints(client, provider):
    document_id = _create_document(client)["document_id"]
    created = client.post(
        "/api/v1/permissions",
        json={"document_id": document_id, "party_id": "user-1", "permission_type": "READ"},
    )
    assert created.status_code == 200, created.text
    permission_id = created.json()["permission_id"]

    listed = client.get(f"/api/v1/documents/{document_id}/permissions")
    assert [p["permission_id"] for p in listed.json()] == [permission_id]

    check = client.get(
        f"/api/v1/documents/{document_id}/permissions/check",
        params={"party_id": "user-1", "permission_type": "READ"},
    )
    assert check.status_code == 200, check.text
    assert check.json()["has_permission"] is True

    deleted = client.delete(f"/api/v1/permissions/{permission_id}")
    assert deleted.status_code == 200, deleted.text
    assert provider.arguments("revoke_permission") == [permission_id]


def test_supplied_identity_on_create_is_rejected(client):
    resp = client.post("/api/v1/documents", json={"document_id": "mine", "name": "x"})
    assert resp.status_code == 400, resp.text
    assert resp.json()["detail"]["code"] == "invalid_argument"


def test_unknown_document_is_not_found(client):
    resp = client.get("/api/v1/documents/does-not-exist")
    assert resp.status_code == 404, resp.text
    assert resp.json()["detail"]["code"] == "document_not_found"
    assert resp.json()["detail"]["detail"] == {"document_id": "does-not-exist"}
