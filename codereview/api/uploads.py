"""Bounded reading of multipart uploads.

Limits are checked here, before any service runs, so oversized requests never reach
business logic.
"""

from typing import List

from fastapi import UploadFile

from codereview.core import BadRequestError, get_config
from codereview.services import UploadedFile

_CHUNK_SIZE = 64 * 1024


async def read_upload(upload: UploadFile, max_size: int) -> UploadedFile:
    """Read ``upload`` fully, failing as soon as it grows past ``max_size`` bytes."""
    chunks = []
    size = 0
    while True:
        chunk = await upload.read(_CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > max_size:
            raise BadRequestError(f"File {upload.filename!r} exceeds the {max_size // (1024 * 1024)} MB limit")
        chunks.append(chunk)
    return UploadedFile(
        filename=upload.filename or "file",
        content_type=upload.content_type or "application/octet-stream",
        data=b"".join(chunks),
    )


async def read_project_files(uploads: List[UploadFile]) -> List[UploadedFile]:
    storage = get_config().STORAGE
    if not uploads:
        raise BadRequestError("No files uploaded")
    if len(uploads) > storage.MAX_FILES:
        raise BadRequestError(f"Too many files, at most {storage.MAX_FILES} per upload")
    return [await read_upload(upload, storage.MAX_FILE_SIZE) for upload in uploads]


async def read_image(upload: UploadFile) -> UploadedFile:
    return await read_upload(upload, get_config().STORAGE.MAX_IMAGE_SIZE)
