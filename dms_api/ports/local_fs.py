from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import replace
from pathlib import Path

from dms_api.ports.base import EcmDocumentVersion

CHUNK_SIZE = 64 * 1024


class LocalFsContentStore:
    """Content capability backed by a local directory."""

    scheme = "file"

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Invalid content key: {key}")
        return path

    def _uri(self, key: str) -> str:
        return f"{self.scheme}://{key}"

    def _write(self, key: str, payload: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)

    async def store_content(self, content_id: str, payload: bytes, mime_type: str) -> str:
        key = f"content/{content_id}"
        await asyncio.to_thread(self._write, key, payload)
        return self._uri(key)

    async def get_content_stream(self, content_id: str) -> AsyncIterator[bytes]:
        path = self._path(f"content/{content_id}")
        handle = await asyncio.to_thread(path.open, "rb")
        try:
            while True:
                chunk = await asyncio.to_thread(handle.read, CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            handle.close()

    async def delete_content(self, content_id: str) -> None:
        path = self._path(f"content/{content_id}")
        await asyncio.to_thread(path.unlink)


class LocalFsVersionStore(LocalFsContentStore):
    """Version capability sharing the content layout.

    A version's bytes live under its own version id, and the same bytes
    become the document's current content, so both content reads resolve.
    """

    async def create_version(self, version: EcmDocumentVersion, payload: bytes) -> EcmDocumentVersion:
        key = f"content/{version.id}"
        await asyncio.to_thread(self._write, key, payload)
        await asyncio.to_thread(self._write, f"content/{version.document_id}", payload)
        return replace(version, storage_path=self._uri(key), size=len(payload))

    async def delete_version(self, version_id: str) -> None:
        path = self._path(f"content/{version_id}")
        await asyncio.to_thread(path.unlink)
