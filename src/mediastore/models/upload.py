"""Upload data models."""

from datetime import datetime

from pydantic import BaseModel


class UploadedFile(BaseModel):
    """A file handed to the adapter by the host.

    The host creates the temporary file at ``path`` before calling ``save``
    and removes it afterwards; the adapter never owns it.
    """

    path: str
    name: str
    content_type: str = "application/octet-stream"


class UploadResponse(BaseModel):
    """Response model for file upload."""

    url: str
    file_name: str
    storage_backend: str
    content_type: str
    size_bytes: int
    created_at: datetime


class ReadResponse(BaseModel):
    """Response model for resolving a stored file to its public URL."""

    path: str
    url: str


class ExistsResponse(BaseModel):
    """Response model for existence checks."""

    filename: str
    exists: bool


class DeleteResponse(BaseModel):
    """Response model for deletions."""

    filename: str
    deleted: bool
