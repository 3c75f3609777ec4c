"""Attach uploaded image URLs to Shopify customers."""

import json
import logging
from typing import Any, Dict, Optional, Sequence

from sizyx.core.exceptions import MetadataWriteError
from sizyx.models.upload import MetadataRecord, StoredArtifact
from sizyx.shopify.client import ShopifyAPIError, ShopifyClient, format_user_errors
from sizyx.storage.base import MetadataAttacher

logger = logging.getLogger(__name__)

METAFIELDS_SET_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id key namespace }
    userErrors { field message }
  }
}
"""

METAOBJECT_CREATE_MUTATION = """
mutation metaobjectCreate($metaobject: MetaobjectCreateInput!) {
  metaobjectCreate(metaobject: $metaobject) {
    metaobject { id handle }
    userErrors { field message }
  }
}
"""


async def _run_mutation(
    client: ShopifyClient, mutation: str, variables: Dict[str, Any], payload_key: str
) -> Dict[str, Any]:
    try:
        data = await client.graphql(mutation, variables)
        payload = data[payload_key]
    except ShopifyAPIError as e:
        raise MetadataWriteError(str(e)) from e
    except (KeyError, TypeError) as e:
        raise MetadataWriteError(f"Malformed {payload_key} response") from e

    if payload.get("userErrors"):
        raise MetadataWriteError(format_user_errors(payload["userErrors"]))
    return payload


class MetafieldAttacher(MetadataAttacher):
    """Writes the URL list as a JSON metafield on the customer.

    The value is overwritten on every upload (last write wins).
    """

    def __init__(self, client: ShopifyClient, namespace: str, key: str):
        self.client = client
        self.namespace = namespace
        self.key = key

    async def attach(
        self,
        account_id: str,
        artifacts: Sequence[StoredArtifact],
        caption: Optional[str] = None,
    ) -> MetadataRecord:
        urls = [artifact.url for artifact in artifacts]
        metafields = [
            {
                "ownerId": account_id,
                "namespace": self.namespace,
                "key": self.key,
                "type": "json",
                "value": json.dumps(urls),
            }
        ]
        if caption:
            metafields.append(
                {
                    "ownerId": account_id,
                    "namespace": self.namespace,
                    "key": f"{self.key}_caption",
                    "type": "single_line_text_field",
                    "value": caption,
                }
            )

        await _run_mutation(
            self.client, METAFIELDS_SET_MUTATION, {"metafields": metafields}, "metafieldsSet"
        )
        logger.info(
            "Images attached to customer",
            extra={"customer_id": account_id, "image_count": len(urls)},
        )
        return MetadataRecord(
            account_id=account_id,
            key=f"{self.namespace}.{self.key}",
            urls=tuple(urls),
            caption=caption,
        )


class MetaobjectAttacher(MetadataAttacher):
    """Creates one metaobject per upload batch, owned by the customer."""

    def __init__(self, client: ShopifyClient, metaobject_type: str):
        self.client = client
        self.metaobject_type = metaobject_type

    async def attach(
        self,
        account_id: str,
        artifacts: Sequence[StoredArtifact],
        caption: Optional[str] = None,
    ) -> MetadataRecord:
        urls = [artifact.url for artifact in artifacts]
        fields = [
            {"key": "customer", "value": account_id},
            {"key": "images", "value": json.dumps(urls)},
        ]
        if caption:
            fields.append({"key": "caption", "value": caption})

        payload = await _run_mutation(
            self.client,
            METAOBJECT_CREATE_MUTATION,
            {"metaobject": {"type": self.metaobject_type, "fields": fields}},
            "metaobjectCreate",
        )
        if not payload.get("metaobject"):
            raise MetadataWriteError("metaobjectCreate returned no metaobject")

        logger.info(
            "Upload metaobject created",
            extra={
                "customer_id": account_id,
                "metaobject_id": payload["metaobject"].get("id"),
                "image_count": len(urls),
            },
        )
        return MetadataRecord(
            account_id=account_id,
            key=self.metaobject_type,
            urls=tuple(urls),
            caption=caption,
        )
