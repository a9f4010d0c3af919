"""Tests for the Google Cloud Storage adapter."""

import hashlib
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from google.api_core.exceptions import GoogleAPIError

from mediastore.core.logging import object_key_context
from mediastore.models.upload import UploadedFile
from mediastore.storage.exceptions import StorageReadError, UploadError
from mediastore.storage.gcs import GCSStorageAdapter
from mediastore.storage.keys import NamingPolicy

CONTENT = b"\x89PNG fake image"


@pytest.fixture
def mock_storage_client():
    """Mock Google Cloud Storage client."""
    with patch("mediastore.storage.gcs.storage.Client") as mock_client:
        yield mock_client


@pytest.fixture
def mock_blob(mock_storage_client):
    """Blob returned for every key in the mocked bucket."""
    blob = MagicMock()
    mock_storage_client.return_value.bucket.return_value.blob.return_value = blob
    return blob


@pytest.fixture
def uploaded_file(tmp_path):
    path = tmp_path / "upload.tmp"
    path.write_bytes(CONTENT)
    return UploadedFile(path=str(path), name="Holiday Photo.PNG", content_type="image/png")


class TestSave:
    """Tests for GCSStorageAdapter.save."""

    @pytest.mark.asyncio
    async def test_save_with_policy(self, mock_storage_client, mock_blob, uploaded_file):
        adapter = GCSStorageAdapter(
            bucket_name="media",
            origin="https://cdn.example.com/",
            naming_policy=NamingPolicy(prefix="[images]/", safe_string=True),
            project_id="test-project",
        )

        url = await adapter.save(uploaded_file)

        assert url == "https://cdn.example.com/images/Holiday-Photo.png"
        mock_storage_client.assert_called_once_with(project="test-project")
        mock_storage_client.return_value.bucket.assert_called_once_with("media")
        mock_storage_client.return_value.bucket.return_value.blob.assert_called_once_with(
            "images/Holiday-Photo.png"
        )
        mock_blob.upload_from_filename.assert_called_once_with(
            uploaded_file.path, content_type="image/png"
        )

    @pytest.mark.asyncio
    async def test_save_without_policy_uses_content_hash(self, mock_storage_client, mock_blob, uploaded_file):
        adapter = GCSStorageAdapter(bucket_name="media")

        url = await adapter.save(uploaded_file)

        digest = hashlib.md5(CONTENT).hexdigest()
        assert url == f"https://storage.googleapis.com/media/{digest}"
        mock_storage_client.return_value.bucket.return_value.blob.assert_called_once_with(digest)

    @pytest.mark.asyncio
    async def test_save_sets_object_key_context(self, mock_storage_client, mock_blob, uploaded_file):
        seen = []
        mock_blob.upload_from_filename.side_effect = lambda *a, **kw: seen.append(object_key_context.get())
        adapter = GCSStorageAdapter(bucket_name="media", naming_policy=NamingPolicy())

        await adapter.save(uploaded_file)

        assert seen == ["Holiday Photo.png"]
        assert object_key_context.get() is None

    @pytest.mark.asyncio
    async def test_save_upload_error(self, mock_storage_client, mock_blob, uploaded_file):
        adapter = GCSStorageAdapter(bucket_name="media", naming_policy=NamingPolicy())

        with patch("asyncio.to_thread", new_callable=AsyncMock) as mock_to_thread:
            mock_to_thread.side_effect = GoogleAPIError("API error")

            with pytest.raises(UploadError, match="API error"):
                await adapter.save(uploaded_file)

    @pytest.mark.asyncio
    async def test_save_unreadable_file_propagates(self, mock_storage_client, mock_blob):
        adapter = GCSStorageAdapter(bucket_name="media", naming_policy=NamingPolicy(hash_as_basename=True))
        missing = UploadedFile(path="/nonexistent/upload.tmp", name="a.png")

        with pytest.raises(FileNotFoundError):
            await adapter.save(missing)

        mock_blob.upload_from_filename.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_missing_bucket(self, mock_storage_client, uploaded_file):
        adapter = GCSStorageAdapter(bucket_name="", naming_policy=NamingPolicy())

        with pytest.raises(ValueError, match="GCS_BUCKET_NAME not configured"):
            await adapter.save(uploaded_file)

        mock_storage_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_renders_prefix_at_upload_time(self, mock_storage_client, mock_blob, uploaded_file):
        adapter = GCSStorageAdapter(
            bucket_name="media",
            origin="https://cdn.example.com",
            naming_policy=NamingPolicy(prefix=lambda: "/YYYY/", extname=False),
        )

        url = await adapter.save(uploaded_file)

        assert url == f"https://cdn.example.com/{datetime.now().year}/Holiday Photo"


class TestAdapterContract:
    """Tests for exists, delete, serve and read."""

    def test_client_not_created_on_init(self, mock_storage_client):
        GCSStorageAdapter(bucket_name="media")
        mock_storage_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_exists_always_false(self, mock_storage_client, mock_blob):
        adapter = GCSStorageAdapter(bucket_name="media", naming_policy=NamingPolicy())

        assert await adapter.exists("photo.jpg") is False
        mock_blob.exists.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_is_noop(self, mock_storage_client, mock_blob):
        adapter = GCSStorageAdapter(bucket_name="media")

        assert await adapter.delete("photo.jpg") is True
        mock_blob.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_serve_passes_through(self):
        adapter = GCSStorageAdapter(bucket_name="media")
        middleware = adapter.serve()
        request = Mock()
        response = Mock()
        call_next = AsyncMock(return_value=response)

        assert await middleware(request, call_next) is response
        call_next.assert_awaited_once_with(request)

    @pytest.mark.asyncio
    async def test_read_from_saved_url(self):
        adapter = GCSStorageAdapter(bucket_name="media", origin="https://cdn.example.com")

        url = await adapter.read("https://cdn.example.com/2024/My Photo.png")

        assert url == "https://cdn.example.com/2024/My%20Photo.png"

    @pytest.mark.asyncio
    async def test_read_from_default_origin(self):
        adapter = GCSStorageAdapter(bucket_name="media")

        url = await adapter.read("https://storage.googleapis.com/media/a/b.png")

        assert url == "https://storage.googleapis.com/media/a/b.png"

    @pytest.mark.asyncio
    async def test_read_from_path(self):
        adapter = GCSStorageAdapter(bucket_name="media", origin="https://cdn.example.com")

        assert await adapter.read("/images/a.png") == "https://cdn.example.com/images/a.png"

    @pytest.mark.asyncio
    async def test_read_ignores_query_and_fragment(self):
        adapter = GCSStorageAdapter(bucket_name="media", origin="https://cdn.example.com")

        own_origin = await adapter.read("https://cdn.example.com/a.png?v=1#top")
        other_origin = await adapter.read("https://other.example.com/a.png?v=1")

        assert own_origin == "https://cdn.example.com/a.png"
        assert other_origin == "https://cdn.example.com/a.png"

    @pytest.mark.asyncio
    async def test_read_default_origin_with_query(self):
        adapter = GCSStorageAdapter(bucket_name="media")

        url = await adapter.read("https://storage.googleapis.com/media/a/b.png?v=2")

        assert url == "https://storage.googleapis.com/media/a/b.png"

    @pytest.mark.asyncio
    async def test_read_does_not_double_encode(self):
        adapter = GCSStorageAdapter(bucket_name="media", origin="https://cdn.example.com")

        url = await adapter.read("https://cdn.example.com/My%20Photo.png")

        assert url == "https://cdn.example.com/My%20Photo.png"

    @pytest.mark.asyncio
    async def test_read_empty_path(self):
        adapter = GCSStorageAdapter(bucket_name="media")

        with pytest.raises(StorageReadError, match="Could not read file"):
            await adapter.read("")

    def test_get_backend_name(self):
        assert GCSStorageAdapter(bucket_name="media").get_backend_name() == "gcs"
