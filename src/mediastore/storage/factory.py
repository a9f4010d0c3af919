"""Storage adapter construction from settings."""

from typing import Optional

from mediastore.core.config import settings
from mediastore.storage.base import StorageAdapter
from mediastore.storage.gcs import GCSStorageAdapter

_adapter: Optional[StorageAdapter] = None


def get_storage_adapter() -> StorageAdapter:
    """Return the configured storage adapter, creating it on first call."""
    global _adapter
    if _adapter is None:
        _adapter = GCSStorageAdapter(
            bucket_name=settings.GCS_BUCKET_NAME,
            origin=settings.STORAGE_ORIGIN,
            naming_policy=settings.naming_policy,
            project_id=settings.GCP_PROJECT_ID,
        )
    return _adapter


def reset_storage_adapter() -> None:
    """Drop the cached adapter so the next call re-reads settings."""
    global _adapter
    _adapter = None
