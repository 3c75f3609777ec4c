"""Abstract storage, gallery and metadata interfaces."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from sizyx.models.upload import FileBlob, MetadataRecord, StoredArtifact


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    async def store(self, file: FileBlob, caption: Optional[str] = None) -> StoredArtifact:
        """Persist one file and return its durable reference.

        Args:
            file: Uploaded file
            caption: Optional caption supplied with the upload

        Returns:
            Stored artifact carrying the public URL

        Raises:
            StagingRequestFailed, BinaryUploadFailed, FileRegistrationFailed
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass


class GalleryLister(ABC):
    """Abstract base class for gallery listings."""

    @abstractmethod
    async def list_urls(self) -> list[str]:
        """Return the public URLs of every stored image.

        Raises:
            GalleryFetchError: If enumeration fails. No partial results.
        """
        pass


class MetadataAttacher(ABC):
    """Abstract base class for writing image URLs against an account."""

    @abstractmethod
    async def attach(
        self,
        account_id: str,
        artifacts: Sequence[StoredArtifact],
        caption: Optional[str] = None,
    ) -> Optional[MetadataRecord]:
        """Persist the ordered artifact URLs for ``account_id``.

        Raises:
            MetadataWriteError: On any transport or application error.
        """
        pass


class NullAttacher(MetadataAttacher):
    """Attacher for backends without an account system."""

    async def attach(
        self,
        account_id: str,
        artifacts: Sequence[StoredArtifact],
        caption: Optional[str] = None,
    ) -> Optional[MetadataRecord]:
        return None
