"""Shopify staged-upload storage backend.

Each file goes through three calls: ``stagedUploadsCreate`` for a pre-signed
target, a multipart POST of the bytes to that target, and ``fileCreate`` to
register the object as a Shopify file with a public URL.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from sizyx.core.exceptions import (
    BinaryUploadFailed,
    FileRegistrationFailed,
    StagingRequestFailed,
)
from sizyx.models.upload import FileBlob, StoredArtifact
from sizyx.shopify.client import ShopifyAPIError, ShopifyClient, format_user_errors
from sizyx.storage.base import StorageBackend

logger = logging.getLogger(__name__)

STAGED_UPLOADS_MUTATION = """
mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters { name value }
    }
    userErrors { field message }
  }
}
"""

FILE_CREATE_MUTATION = """
mutation fileCreate($files: [FileCreateInput!]!) {
  fileCreate(files: $files) {
    files {
      id
      fileStatus
      preview { image { url } }
      ... on MediaImage { image { url } }
    }
    userErrors { field message }
  }
}
"""


class ShopifyFileStore(StorageBackend):
    """Stores images as Shopify Files via staged uploads."""

    def __init__(self, client: ShopifyClient):
        self.client = client

    async def request_target(self, file: FileBlob) -> Dict[str, Any]:
        """Ask Shopify for a short-lived upload target sized to ``file``."""
        staged_input = {
            "resource": "IMAGE",
            "filename": file.filename,
            "mimeType": file.mime_type,
            # StagedUploadInput.fileSize is an UnsignedInt64, sent as a string
            "fileSize": str(file.size_bytes),
            "httpMethod": "POST",
        }
        try:
            data = await self.client.graphql(STAGED_UPLOADS_MUTATION, {"input": [staged_input]})
            payload = data["stagedUploadsCreate"]
        except ShopifyAPIError as e:
            raise StagingRequestFailed(str(e)) from e
        except (KeyError, TypeError) as e:
            raise StagingRequestFailed("Malformed stagedUploadsCreate response") from e

        if payload.get("userErrors"):
            raise StagingRequestFailed(format_user_errors(payload["userErrors"]))
        targets = payload.get("stagedTargets") or []
        if not targets or not targets[0].get("url") or not targets[0].get("resourceUrl"):
            raise StagingRequestFailed("stagedUploadsCreate returned no target")
        return targets[0]

    async def upload_bytes(self, target: Dict[str, Any], file: FileBlob) -> None:
        """POST the raw bytes to the staged target as a multipart form.

        The target's parameters must precede the file part. Any 2xx counts as
        success (S3 targets answer 204, GCS targets 201).
        """
        form = {param["name"]: param["value"] for param in target.get("parameters") or []}
        try:
            response = await self.client.http.post(
                target["url"],
                data=form,
                files={"file": (file.filename, file.data, file.mime_type)},
            )
        except httpx.HTTPError as e:
            raise BinaryUploadFailed(f"Upload to staged target failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Staged target rejected upload",
                extra={"status_code": response.status_code, "body": response.text[:500]},
            )
            raise BinaryUploadFailed(
                f"Staged target answered {response.status_code} for {file.filename}"
            )

    async def register(
        self, resource_url: str, file: FileBlob, caption: Optional[str] = None
    ) -> str:
        """Create the Shopify file entity and return its URL."""
        file_input = {
            "originalSource": resource_url,
            "contentType": "IMAGE",
            "alt": caption or file.filename,
        }
        try:
            data = await self.client.graphql(FILE_CREATE_MUTATION, {"files": [file_input]})
            payload = data["fileCreate"]
        except ShopifyAPIError as e:
            raise FileRegistrationFailed(str(e)) from e
        except (KeyError, TypeError) as e:
            raise FileRegistrationFailed("Malformed fileCreate response") from e

        # fileCreate reports failures in userErrors with HTTP 200
        if payload.get("userErrors"):
            raise FileRegistrationFailed(format_user_errors(payload["userErrors"]))
        files = payload.get("files") or []
        if not files:
            raise FileRegistrationFailed("fileCreate returned no file")

        created = files[0]
        image_url = (created.get("image") or {}).get("url")
        preview_url = ((created.get("preview") or {}).get("image") or {}).get("url")
        # Image processing is asynchronous; fall back to the staged resource
        return image_url or preview_url or resource_url

    async def store(self, file: FileBlob, caption: Optional[str] = None) -> StoredArtifact:
        target = await self.request_target(file)
        await self.upload_bytes(target, file)
        url = await self.register(target["resourceUrl"], file, caption)

        logger.info(
            "File uploaded",
            extra={"source_filename": file.filename, "url": url, "size_bytes": file.size_bytes},
        )
        return StoredArtifact(url=url, source_filename=file.filename, mime_type=file.mime_type)

    def get_backend_name(self) -> str:
        return "shopify"
