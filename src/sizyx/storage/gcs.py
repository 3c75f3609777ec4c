"""Google Cloud Storage backend."""

import asyncio
import logging
import re
import time
from pathlib import PurePosixPath
from typing import Optional
from uuid import uuid4

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage

from sizyx.core.config import Settings
from sizyx.core.exceptions import BinaryUploadFailed, GalleryFetchError
from sizyx.models.upload import FileBlob, StoredArtifact
from sizyx.storage.base import GalleryLister, StorageBackend

logger = logging.getLogger(__name__)


class GCSStorageBackend(StorageBackend, GalleryLister):
    """Writes uploads straight into a public GCS bucket."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[storage.Bucket] = None

    def _get_bucket(self) -> storage.Bucket:
        """Lazy-load and cache GCS bucket."""
        if self._bucket is None:
            if not self.settings.GCS_BUCKET_NAME:
                raise ValueError("GCS_BUCKET_NAME not configured")

            self._client = storage.Client(project=self.settings.GCP_PROJECT_ID or None)
            self._bucket = self._client.bucket(self.settings.GCS_BUCKET_NAME)

        return self._bucket

    def public_url(self, object_name: str) -> str:
        base = self.settings.GCS_PUBLIC_BASE_URL.rstrip("/")
        return f"{base}/{self.settings.GCS_BUCKET_NAME}/{object_name}"

    def object_name_for(self, file_name: str, caption: Optional[str] = None) -> str:
        """Build an object name from a millisecond timestamp and a random suffix.

        Without a caption: ``<ms>_<suffix>_<filename>``. With one:
        ``<caption>_<ms>_<suffix><ext>``. The suffix keeps names unique when
        two files land in the same millisecond.
        """
        timestamp_ms = int(time.time() * 1000)
        suffix = uuid4().hex[:8]
        safe_name = self._sanitize_filename(file_name or "unnamed")
        if caption and caption.strip():
            extension = PurePosixPath(safe_name).suffix
            return f"{self._sanitize_filename(caption.strip())}_{timestamp_ms}_{suffix}{extension}"
        return f"{timestamp_ms}_{suffix}_{safe_name}"

    async def store(self, file: FileBlob, caption: Optional[str] = None) -> StoredArtifact:
        """Upload the file bytes to GCS. No retry on failure."""
        object_name = self.object_name_for(file.filename, caption)

        try:
            bucket = self._get_bucket()
            blob = bucket.blob(object_name)
            await asyncio.to_thread(
                blob.upload_from_string,
                file.data,
                content_type=file.mime_type,
                retry=None,
            )
        except GoogleAPIError as e:
            logger.error(
                f"Failed to upload {file.filename}: {e}",
                extra={"object_name": object_name, "error": str(e), "status_code": getattr(e, "code", None)},
            )
            raise BinaryUploadFailed(f"GCS write failed for {object_name}: {e}") from e
        except Exception as e:
            logger.error(
                f"Failed to upload {file.filename}: {e}",
                extra={"object_name": object_name, "error": str(e)},
            )
            raise BinaryUploadFailed(f"GCS write failed for {object_name}: {e}") from e

        url = self.public_url(object_name)
        logger.info(
            "File uploaded",
            extra={"object_name": object_name, "url": url, "size_bytes": file.size_bytes},
        )
        return StoredArtifact(url=url, source_filename=file.filename, mime_type=file.mime_type)

    async def list_urls(self) -> list[str]:
        """List every object in the bucket as a public URL."""
        try:
            bucket = self._get_bucket()
            blobs = await asyncio.to_thread(lambda: list(bucket.list_blobs()))
        except Exception as e:
            logger.error(f"Gallery fetch failed: {e}", extra={"error": str(e)})
            raise GalleryFetchError(f"Failed to list bucket: {e}") from e

        return [self.public_url(blob.name) for blob in blobs]

    def get_backend_name(self) -> str:
        return "gcs"

    @staticmethod
    def _sanitize_filename(filename: str) -> str:
        """Remove path traversal and dangerous characters."""
        safe = filename.replace("../", "").replace("..\\", "")
        safe = safe.replace("/", "_").replace("\\", "_")
        safe = re.sub(r"[^a-zA-Z0-9._-]", "_", safe)
        return safe[:255]
