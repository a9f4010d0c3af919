"""Content fingerprints for content-addressed file keys."""

import asyncio
import hashlib

from mediastore.models.upload import UploadedFile

CHUNK_SIZE = 65536  # 64KB chunks


def _md5_file(path: str) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


async def fingerprint(file: UploadedFile) -> str:
    """Compute the hex MD5 digest of the file's bytes.

    The read runs in a worker thread so other resolutions are not blocked.

    Args:
        file: Uploaded file whose local ``path`` is read

    Returns:
        32-character lowercase hex digest

    Raises:
        OSError: If the file cannot be read
    """
    return await asyncio.to_thread(_md5_file, file.path)
