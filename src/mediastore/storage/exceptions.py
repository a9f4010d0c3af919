"""Custom exceptions for storage adapters."""


class StorageError(Exception):
    """Base exception for storage adapter operations."""
    pass


class UploadError(StorageError):
    """Exception raised when the remote upload fails."""
    pass


class StorageReadError(StorageError):
    """Exception raised when a stored file cannot be resolved for reading."""
    pass
