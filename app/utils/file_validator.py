"""Attachment upload validation."""

from fastapi import UploadFile

from app.settings import settings
from app.utils.exceptions import PayloadTooLargeError, ValidationError

CHUNK_SIZE = 64 * 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"


async def read_upload(file: UploadFile, max_bytes: int | None = None) -> bytes:
    """
    Reads an uploaded attachment into memory, enforcing the size limit.

    Args:
        file: The file uploaded via a FastAPI endpoint.
        max_bytes: Upper bound in bytes; defaults to MAX_UPLOAD_BYTES.

    Raises:
        ValidationError: If no file name was sent.
        PayloadTooLargeError: If the file exceeds the limit.
    """
    limit = max_bytes or settings.MAX_UPLOAD_BYTES
    if not file.filename:
        raise ValidationError("No file uploaded")

    chunks: list[bytes] = []
    total_size = 0
    while chunk := await file.read(CHUNK_SIZE):
        total_size += len(chunk)
        if total_size > limit:
            raise PayloadTooLargeError(
                f"File size exceeds the {limit // (1024 * 1024)}MB limit."
            )
        chunks.append(chunk)
    return b"".join(chunks)


def content_type_of(file: UploadFile) -> str:
    return file.content_type or DEFAULT_CONTENT_TYPE
