from datetime import datetime, timezone

import pytest

from dms_api.core.capabilities import CapabilityKind
from dms_api.core.config import Settings
from dms_api.ports.base import EcmDocumentVersion
from dms_api.ports.local_fs import LocalFsContentStore, LocalFsVersionStore
from dms_api.ports.registry import build_capability_registry


async def test_content_store_round_trip(tmp_path):
    store = LocalFsContentStore(tmp_path)
    locator = await store.store_content("doc-1", b"hello world", "text/plain")
    assert locator == "file://content/doc-1"

    chunks = [chunk async for chunk in store.get_content_stream("doc-1")]
    assert b"".join(chunks) == b"hello world"

    await store.delete_content("doc-1")
    assert not (tmp_path / "content" / "doc-1").exists()


async def test_content_store_rejects_escaping_keys(tmp_path):
    store = LocalFsContentStore(tmp_path)
    with pytest.raises(ValueError):
        await store.store_content("../../outside", b"x", "text/plain")


async def test_version_store_writes_and_deletes_version(tmp_path):
    store = LocalFsVersionStore(tmp_path)
    version = EcmDocumentVersion(
        id="v-1",
        document_id="doc-1",
        version_number=1,
        version_label="v1",
        comment="Version created",
        size=0,
        mime_type="text/plain",
        created_at=datetime.now(timezone.utc),
    )
    created = await store.create_version(version, b"abc")
    assert created.storage_path == "file://content/v-1"
    assert created.size == 3
    assert (tmp_path / "content" / "v-1").read_bytes() == b"abc"
    assert (tmp_path / "content" / "doc-1").read_bytes() == b"abc"

    await store.delete_version("v-1")
    with pytest.raises(FileNotFoundError):
        await store.delete_version("v-1")


def test_registry_factory_honours_backend_names(tmp_path):
    registry = build_capability_registry(
        Settings(content_backend="fs", version_backend="none", local_content_store_path=str(tmp_path))
    )
    assert registry.available() == {CapabilityKind.CONTENT}

    with pytest.raises(ValueError):
        build_capability_registry(Settings(content_backend="s3"))
