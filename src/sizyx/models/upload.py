"""Upload domain models."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class FileBlob:
    """An uploaded file held in memory for the lifetime of one request."""

    filename: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadRequest:
    """Validated contents of a POST /upload form."""

    customer_email: str
    files: tuple[FileBlob, ...]
    customer_name: Optional[str] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class Account:
    """Remote customer record, keyed by email."""

    id: str
    email: str
    name: Optional[str] = None


@dataclass(frozen=True)
class StoredArtifact:
    """Durable reference to one stored file."""

    url: str
    source_filename: str
    mime_type: str


@dataclass(frozen=True)
class MetadataRecord:
    """Image URLs written against a customer."""

    account_id: str
    key: str
    urls: tuple[str, ...]
    caption: Optional[str] = None
