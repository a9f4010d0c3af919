"""Abstract storage adapter interface required by the host."""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from fastapi import Request, Response

from mediastore.models.upload import UploadedFile

CallNext = Callable[[Request], Awaitable[Response]]
ServeMiddleware = Callable[[Request, CallNext], Awaitable[Response]]


class StorageAdapter(ABC):
    """Abstract base class for pluggable media storage backends."""

    @abstractmethod
    async def save(self, file: UploadedFile, target_dir: Optional[str] = None) -> str:
        """Persist an uploaded file.

        Args:
            file: File handed over by the host
            target_dir: Directory hint from the host

        Returns:
            Public URL of the stored file
        """
        pass

    @abstractmethod
    async def exists(self, filename: str, target_dir: Optional[str] = None) -> bool:
        """Report whether a file is already stored under this name."""
        pass

    @abstractmethod
    def serve(self) -> ServeMiddleware:
        """Return HTTP middleware serving stored files."""
        pass

    @abstractmethod
    async def delete(
        self, filename: Optional[str] = None, target_dir: Optional[str] = None
    ) -> bool:
        """Remove a stored file."""
        pass

    @abstractmethod
    async def read(self, path: str) -> str:
        """Resolve a stored file path or URL for reading.

        Args:
            path: Path or URL previously returned by ``save``

        Returns:
            Public download URL
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass
