"""Blob storage for ticket attachments: local disk or a Supabase Storage bucket."""

import asyncio
import posixpath
from pathlib import Path
from typing import Protocol

from supabase import StorageException

from app.config.supabase import supabase_admin
from app.settings import settings
from app.utils.exceptions import NotFoundError
from app.utils.logging_config import logger


class BlobStore(Protocol):
    async def save(self, path: str, data: bytes, content_type: str) -> str: ...

    async def delete(self, path: str) -> None: ...

    async def exists(self, path: str) -> bool: ...

    async def read(self, path: str) -> bytes: ...


class LocalBlobStore:
    """Stores blobs as files below a root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        full = (self.root / path).resolve()
        if not full.is_relative_to(self.root):
            raise ValueError(f"Storage path escapes the upload directory: {path}")
        return full

    async def save(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, data)
        logger.info(f"Attachment stored at {target}")
        return path

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        await asyncio.to_thread(target.unlink, missing_ok=True)
        logger.info(f"Attachment removed from {target}")

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).is_file)

    async def read(self, path: str) -> bytes:
        target = self._resolve(path)
        if not await self.exists(path):
            raise NotFoundError("File not found on server")
        return await asyncio.to_thread(target.read_bytes)


class SupabaseBlobStore:
    """Stores blobs in a Supabase Storage bucket."""

    def __init__(self, bucket: str):
        self.bucket = bucket

    async def _bucket(self):
        client = await supabase_admin()
        return client.storage.from_(self.bucket)

    async def save(self, path: str, data: bytes, content_type: str) -> str:
        bucket = await self._bucket()
        try:
            await bucket.upload(
                path=path, file=data, file_options={"content-type": content_type}
            )
            logger.info(f"Attachment uploaded to storage at path: {path}")
        except StorageException as exc:
            logger.error(f"Failed to upload attachment to storage: {exc}", exc_info=True)
            raise
        return path

    async def delete(self, path: str) -> None:
        bucket = await self._bucket()
        try:
            await bucket.remove([path])
            logger.info(f"Attachment removed from storage at path: {path}")
        except StorageException as exc:
            logger.error(f"Failed to remove attachment from storage: {exc}", exc_info=True)
            raise

    async def exists(self, path: str) -> bool:
        bucket = await self._bucket()
        folder, name = posixpath.split(path)
        entries = await bucket.list(folder)
        return any(entry.get("name") == name for entry in entries)

    async def read(self, path: str) -> bytes:
        bucket = await self._bucket()
        try:
            return await bucket.download(path)
        except StorageException as exc:
            logger.warning(f"Attachment missing from storage at path {path}: {exc}")
            raise NotFoundError("File not found on server") from exc


def build_blob_store() -> BlobStore:
    if settings.STORAGE_BACKEND == "supabase":
        return SupabaseBlobStore(settings.ATTACHMENTS_BUCKET)
    return LocalBlobStore(settings.UPLOAD_DIR)
