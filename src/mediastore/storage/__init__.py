"""
Media storage adapters.

Adapters persist host uploads in remote object storage under keys derived
from the file name and a configurable naming policy.
"""

from mediastore.storage.base import StorageAdapter
from mediastore.storage.exceptions import StorageError, StorageReadError, UploadError
from mediastore.storage.fingerprint import fingerprint
from mediastore.storage.gcs import GCSStorageAdapter
from mediastore.storage.keys import BasenameMode, NamingPolicy, resolve_key, safe_string

__all__ = [
    "StorageAdapter",
    "GCSStorageAdapter",
    "NamingPolicy",
    "BasenameMode",
    "resolve_key",
    "safe_string",
    "fingerprint",
    "StorageError",
    "StorageReadError",
    "UploadError",
]
