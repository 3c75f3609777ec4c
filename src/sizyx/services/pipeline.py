"""Upload orchestration: resolve customer, store files, attach URLs."""

import logging
from typing import Optional

from sizyx.core.exceptions import SizyxError
from sizyx.models.upload import StoredArtifact, UploadRequest
from sizyx.shopify.customers import IdentityResolver
from sizyx.storage.base import MetadataAttacher, NullAttacher, StorageBackend

logger = logging.getLogger(__name__)


class UploadPipeline:
    """Runs one upload request through the remote calls in a fixed order.

    Files are stored one at a time in submission order, so the returned
    artifacts line up with ``request.files``. Nothing is rolled back: when a
    later step fails, the URLs already stored are logged for reconciliation.
    """

    def __init__(
        self,
        backend: StorageBackend,
        resolver: Optional[IdentityResolver] = None,
        attacher: Optional[MetadataAttacher] = None,
    ):
        self.backend = backend
        self.resolver = resolver
        self.attacher = attacher or NullAttacher()

    async def run(self, request: UploadRequest) -> list[StoredArtifact]:
        account_id = None
        if self.resolver is not None:
            account_id = await self.resolver.resolve(
                request.customer_email, request.customer_name
            )

        artifacts: list[StoredArtifact] = []
        try:
            for file in request.files:
                artifacts.append(await self.backend.store(file, request.caption))

            if account_id is not None:
                await self.attacher.attach(account_id, artifacts, request.caption)
        except SizyxError as e:
            if artifacts:
                logger.error(
                    "Upload failed after storing files",
                    extra={
                        "customer_id": account_id,
                        "stored_urls": [artifact.url for artifact in artifacts],
                        "failed_step": type(e).__name__,
                    },
                )
            raise

        logger.info(
            "Upload completed",
            extra={
                "customer_id": account_id,
                "backend": self.backend.get_backend_name(),
                "image_count": len(artifacts),
            },
        )
        return artifacts
