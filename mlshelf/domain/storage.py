# mlshelf/domain/storage.py
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, List

from loguru import logger


def make_storage_key(filename: str) -> str:
    """Random prefix plus the file's base name; unique per upload."""
    base = PurePosixPath(filename.replace("\\", "/")).name or "model"
    return f"{uuid.uuid4().hex}-{base}"


# ---------------------------------------------------------
# Base class
# ---------------------------------------------------------
class BlobStore:
    def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Store the bytes under `key` and return the stored key."""
        raise NotImplementedError

    def signed_url(self, key: str, expires_in: int, download_as: str | None = None) -> str:
        """Return a time-limited URL for the blob."""
        raise NotImplementedError

    def remove(self, keys: List[str]) -> None:
        raise NotImplementedError


# ---------------------------------------------------------
# Supabase Storage implementation
# ---------------------------------------------------------
@dataclass
class SupabaseBlobStore(BlobStore):
    client: Any
    bucket: str = "models"

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        options = {"content-type": content_type or "application/octet-stream"}
        self._bucket().upload(path=key, file=data, file_options=options)
        logger.debug("Stored blob {} ({} bytes) in bucket {}", key, len(data), self.bucket)
        return key

    def signed_url(self, key: str, expires_in: int, download_as: str | None = None) -> str:
        options = {"download": download_as} if download_as else {}
        result = self._bucket().create_signed_url(key, expires_in, options)
        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise RuntimeError(f"Storage returned no signed URL for {key}")
        return url

    def remove(self, keys: List[str]) -> None:
        self._bucket().remove(keys)
