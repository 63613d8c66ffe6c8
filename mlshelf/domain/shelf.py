# mlshelf/domain/shelf.py
from pathlib import PurePosixPath
from typing import List, Optional

from loguru import logger

from .errors import ModelValidationError, UploadError
from .models import DownloadLink, ModelFile, ModelMetadata, ModelRecord
from .repos import ModelRepo
from .storage import BlobStore, make_storage_key
from .validation import MAX_FILE_SIZE, validate_file, validate_metadata
from ..core.config import Settings

SIGNED_URL_TTL_SECONDS = 60


def download_filename(record: ModelRecord) -> str:
    """Record name, carrying over the stored file's extension when the name lacks it."""
    suffix = PurePosixPath(record.file_path).suffix
    if suffix and not record.name.lower().endswith(suffix.lower()):
        return f"{record.name}{suffix}"
    return record.name


class ModelShelf:
    """View state over the model list plus the upload and download sequences.

    One shelf serves one request: `models`, `loading` and `error` describe what
    that request last saw.
    """

    def __init__(
        self,
        repo: ModelRepo,
        blobs: BlobStore,
        max_upload_bytes: int = MAX_FILE_SIZE,
        signed_url_ttl: int = SIGNED_URL_TTL_SECONDS,
    ):
        self.repo = repo
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes
        self.signed_url_ttl = signed_url_ttl
        self.models: List[ModelRecord] = []
        self.loading = False
        self.error: Optional[str] = None

    @classmethod
    def from_settings(cls, repo: ModelRepo, blobs: BlobStore, settings: Settings) -> "ModelShelf":
        return cls(
            repo,
            blobs,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
            signed_url_ttl=settings.SIGNED_URL_TTL_SECONDS,
        )

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def refresh(self) -> List[ModelRecord]:
        self.loading = True
        try:
            self.models = self.repo.list_all()
            self.error = None
        except Exception as exc:
            logger.error("Failed to fetch models: {}", exc)
            self.error = str(exc) or "Failed to fetch models"
        finally:
            self.loading = False
        return self.models

    def user_models(self, user_id: str) -> List[ModelRecord]:
        try:
            return self.repo.list_by_owner(user_id)
        except Exception as exc:
            logger.error("Failed to fetch user models: {}", exc)
            return []

    def find(self, record_id: str) -> Optional[ModelRecord]:
        try:
            return self.repo.get(record_id)
        except Exception as exc:
            logger.warning("Lookup of model {} failed: {}", record_id, exc)
            return None

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self, file: Optional[ModelFile], metadata: ModelMetadata, user_id: Optional[str]
    ) -> ModelRecord:
        """Store the blob, then its row; remove the blob again if the row is refused.

        Raises ModelValidationError before any backend call, UploadError for
        backend failures.
        """
        file = validate_file(file, self.max_upload_bytes)
        if not user_id:
            raise ModelValidationError("You must be signed in to upload models")
        validate_metadata(metadata)

        key = make_storage_key(file.filename)
        logger.info(
            "Uploading {} ({} bytes) for user {} as {}",
            file.filename,
            file.size,
            user_id,
            key,
        )

        try:
            self.blobs.upload(key, file.content, file.content_type)
        except Exception as exc:
            logger.error("Storage upload failed: {}", exc)
            raise UploadError(f"File upload failed: {exc}") from exc

        row = metadata.to_row(user_id=user_id, file_path=key, size_bytes=file.size)
        try:
            record = self.repo.insert(row)
        except Exception as exc:
            logger.error("Database insert failed: {}", exc)
            self._discard_blob(key)
            raise UploadError(f"Database error: {exc}") from exc

        logger.info("Model {} saved as record {}", record.name, record.id)
        self.refresh()
        return record

    def _discard_blob(self, key: str) -> None:
        try:
            self.blobs.remove([key])
        except Exception as exc:
            logger.warning("Could not remove orphaned blob {}: {}", key, exc)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download(self, record: ModelRecord, refresh: bool = True) -> Optional[DownloadLink]:
        """Issue a signed link and count the download; None when the link fails.

        With `refresh` the shelf reloads `models` afterwards so its view state
        shows the new count. Callers that only hand out the link pass False.
        """
        try:
            filename = download_filename(record)
            url = self.blobs.signed_url(
                record.file_path, self.signed_url_ttl, download_as=filename
            )
            try:
                record.downloads = self.repo.increment_downloads(record)
            except Exception as exc:
                logger.warning("Download count for {} not updated: {}", record.id, exc)
            link = DownloadLink(url=url, filename=filename, expires_in=self.signed_url_ttl)
        except Exception:
            logger.exception("Download failed for model {}", record.id)
            return None

        if refresh:
            self.refresh()
        return link
