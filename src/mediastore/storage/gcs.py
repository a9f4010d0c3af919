"""Google Cloud Storage adapter."""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote, unquote, urlparse

from fastapi import Request, Response
from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from mediastore.core.logging import object_key_context
from mediastore.models.upload import UploadedFile
from mediastore.storage.base import CallNext, ServeMiddleware, StorageAdapter
from mediastore.storage.exceptions import StorageReadError, UploadError
from mediastore.storage.fingerprint import fingerprint
from mediastore.storage.keys import NamingPolicy, resolve_key

logger = logging.getLogger(__name__)

PUBLIC_ORIGIN = "https://storage.googleapis.com"


class GCSStorageAdapter(StorageAdapter):
    """Stores media in a Google Cloud Storage bucket and serves public URLs."""

    def __init__(
        self,
        bucket_name: str,
        origin: str = "",
        naming_policy: Optional[NamingPolicy] = None,
        project_id: Optional[str] = None,
    ):
        """Initialize the adapter. The GCS client is created on first use.

        Args:
            bucket_name: Name of the GCS bucket
            origin: Public URL origin for stored objects
            naming_policy: Key naming policy, None to use content hashes
            project_id: GCP project ID. If None, uses default credentials.
        """
        self.bucket_name = bucket_name
        self.origin = (origin or f"{PUBLIC_ORIGIN}/{bucket_name}").rstrip("/")
        self.naming_policy = naming_policy
        self.project_id = project_id or None
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[storage.Bucket] = None

    def _get_bucket(self) -> storage.Bucket:
        """Lazy-load and cache GCS bucket."""
        if self._bucket is None:
            if not self.bucket_name:
                raise ValueError("GCS_BUCKET_NAME not configured")

            self._client = storage.Client(project=self.project_id)
            self._bucket = self._client.bucket(self.bucket_name)

        return self._bucket

    async def save(self, file: UploadedFile, target_dir: Optional[str] = None) -> str:
        """Upload the file under its derived key and return its public URL.

        Raises:
            OSError: If the local file cannot be read for hashing
            UploadError: If the upload to GCS fails
        """
        key = await resolve_key(file, self.naming_policy)
        if key is None:
            key = await fingerprint(file)

        token = object_key_context.set(key)
        try:
            blob = self._get_bucket().blob(key)
            await asyncio.to_thread(
                blob.upload_from_filename,
                file.path,
                content_type=file.content_type,
            )
            logger.info(
                f"Uploaded {file.name} as {key}",
                extra={"source": file.path, "bucket": self.bucket_name},
            )
        except GoogleAPIError as e:
            logger.error(
                f"Failed to upload {file.name}: {e}",
                extra={"source": file.path, "bucket": self.bucket_name, "error": str(e)},
            )
            raise UploadError(f"Failed to upload {file.name}: {e}") from e
        finally:
            object_key_context.reset(token)

        return f"{self.origin}/{key}"

    async def exists(self, filename: str, target_dir: Optional[str] = None) -> bool:
        """Always False: stored keys are not looked up, so the host never skips a save."""
        # TODO: check the resolved key with blob.exists() once keys are deterministic per filename
        return False

    def serve(self) -> ServeMiddleware:
        """Return a passthrough middleware; stored files are absolute public URLs."""

        async def passthrough(request: Request, call_next: CallNext) -> Response:
            return await call_next(request)

        return passthrough

    async def delete(
        self, filename: Optional[str] = None, target_dir: Optional[str] = None
    ) -> bool:
        """No-op. Objects are left in the bucket."""
        logger.debug(f"Delete requested for {filename}, leaving object in place")
        return True

    async def read(self, path: str) -> str:
        """Map a stored URL or path to the public download URL of its object."""
        path = path or ""
        parsed = urlparse(path)
        key_path = parsed.path
        if path.startswith(f"{self.origin}/"):
            # Origins such as https://storage.googleapis.com/<bucket> carry a path
            origin_path = urlparse(self.origin).path
            key_path = key_path[len(origin_path):]
        key = unquote(key_path[1:])
        if not key:
            logger.error(f"Could not read file: {path}", extra={"bucket": self.bucket_name})
            raise StorageReadError(f"Could not read file: {path}")
        return f"{self.origin}/{quote(key)}"

    def get_backend_name(self) -> str:
        return "gcs"
