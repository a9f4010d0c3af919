"""Upload and file API routes."""

import asyncio
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from typing import BinaryIO

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from mediastore.core.config import settings
from mediastore.models.upload import (
    DeleteResponse,
    ExistsResponse,
    ReadResponse,
    UploadedFile,
    UploadResponse,
)
from mediastore.storage.exceptions import StorageError, StorageReadError
from mediastore.storage.factory import get_storage_adapter

router = APIRouter(prefix="/api/v1", tags=["upload"])
logger = logging.getLogger(__name__)


def _spool_upload(source: BinaryIO, fd: int) -> None:
    with os.fdopen(fd, "wb") as tmp:
        shutil.copyfileobj(source, tmp, 65536)


@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_file(file: UploadFile = File(...)) -> UploadResponse:
    """Upload a media file to the configured storage backend."""
    # Validate file size
    file.file.seek(0, 2)
    size_bytes = file.file.tell()
    file.file.seek(0)

    if size_bytes > settings.max_upload_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds maximum allowed size of {settings.MAX_UPLOAD_MB}MB",
        )

    content_type = file.content_type or "application/octet-stream"
    if settings.allowed_mime_types and content_type not in settings.allowed_mime_types:
        raise HTTPException(
            status_code=400,
            detail=f"Content type {content_type} not allowed",
        )

    adapter = get_storage_adapter()
    file_name = file.filename or "unnamed"

    # The host owns the temporary copy: created before save, removed after
    fd, tmp_path = tempfile.mkstemp(prefix="upload-")
    try:
        await asyncio.to_thread(_spool_upload, file.file, fd)

        uploaded = UploadedFile(path=tmp_path, name=file_name, content_type=content_type)
        try:
            url = await adapter.save(uploaded)
        except ValueError as e:
            logger.error(f"Storage backend configuration error: {e}")
            raise HTTPException(status_code=500, detail="Storage configuration error")
        except (StorageError, OSError) as e:
            logger.error(f"Failed to store file: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to store file")
    finally:
        os.unlink(tmp_path)

    logger.info(
        f"Upload completed: file_name={file_name}, "
        f"backend={adapter.get_backend_name()}, size={size_bytes}"
    )

    return UploadResponse(
        url=url,
        file_name=file_name,
        storage_backend=adapter.get_backend_name(),
        content_type=content_type,
        size_bytes=size_bytes,
        created_at=datetime.now(timezone.utc),
    )


@router.get("/files/read", response_model=ReadResponse)
async def read_file(path: str = Query(...)) -> ReadResponse:
    """Resolve a stored file URL or path to its public download URL."""
    adapter = get_storage_adapter()
    try:
        url = await adapter.read(path)
    except StorageReadError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ReadResponse(path=path, url=url)


@router.get("/files/exists", response_model=ExistsResponse)
async def file_exists(filename: str = Query(...)) -> ExistsResponse:
    """Check whether a file is already stored."""
    adapter = get_storage_adapter()
    return ExistsResponse(filename=filename, exists=await adapter.exists(filename))


@router.delete("/files", response_model=DeleteResponse)
async def delete_file(filename: str = Query(...)) -> DeleteResponse:
    """Delete a stored file."""
    adapter = get_storage_adapter()
    return DeleteResponse(filename=filename, deleted=await adapter.delete(filename))
