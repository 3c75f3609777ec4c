"""Gallery listings backed by Shopify customer metadata."""

import json
import logging
from abc import abstractmethod
from typing import Any, AsyncIterator, Dict, Optional

from sizyx.core.exceptions import GalleryFetchError
from sizyx.shopify.client import ShopifyAPIError, ShopifyClient
from sizyx.storage.base import GalleryLister

logger = logging.getLogger(__name__)

PAGE_SIZE = 250

CUSTOMERS_METAFIELD_QUERY = """
query customerImages($first: Int!, $after: String, $namespace: String!, $key: String!) {
  customers(first: $first, after: $after) {
    edges {
      node {
        id
        metafield(namespace: $namespace, key: $key) { value }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

METAOBJECTS_QUERY = """
query uploadMetaobjects($type: String!, $first: Int!, $after: String) {
  metaobjects(type: $type, first: $first, after: $after) {
    edges {
      node {
        id
        field(key: "images") { value }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""


def decode_url_list(raw: Optional[str], owner_id: str) -> list[str]:
    """Decode a JSON-encoded URL list, skipping values that are not one."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Skipping malformed image list", extra={"owner_id": owner_id})
        return []
    if not isinstance(value, list):
        logger.warning("Skipping malformed image list", extra={"owner_id": owner_id})
        return []
    return [url for url in value if isinstance(url, str)]


class _PagedLister(GalleryLister):
    """Walks a cursor-paginated connection and flattens URL lists."""

    connection: str

    def __init__(self, client: ShopifyClient):
        self.client = client

    @abstractmethod
    def _query(self) -> str:
        pass

    @abstractmethod
    def _variables(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def _raw_value(self, node: Dict[str, Any]) -> Optional[str]:
        """Return the JSON-encoded URL list stored on ``node``."""
        pass

    async def _pages(self) -> AsyncIterator[list[Dict[str, Any]]]:
        after: Optional[str] = None
        while True:
            variables = {**self._variables(), "first": PAGE_SIZE, "after": after}
            try:
                data = await self.client.graphql(self._query(), variables)
                connection = data[self.connection]
                nodes = [edge["node"] for edge in connection["edges"]]
                page_info = connection["pageInfo"]
            except ShopifyAPIError as e:
                raise GalleryFetchError(str(e)) from e
            except (KeyError, TypeError) as e:
                raise GalleryFetchError(f"Malformed {self.connection} response") from e

            yield nodes

            if not page_info.get("hasNextPage"):
                break
            after = page_info.get("endCursor")

    async def list_urls(self) -> list[str]:
        urls: list[str] = []
        async for nodes in self._pages():
            for node in nodes:
                urls.extend(decode_url_list(self._raw_value(node), node.get("id", "")))
        return urls


class CustomerGalleryLister(_PagedLister):
    """Lists images from the JSON metafield on every customer."""

    connection = "customers"

    def __init__(self, client: ShopifyClient, namespace: str, key: str):
        super().__init__(client)
        self.namespace = namespace
        self.key = key

    def _query(self) -> str:
        return CUSTOMERS_METAFIELD_QUERY

    def _variables(self) -> Dict[str, Any]:
        return {"namespace": self.namespace, "key": self.key}

    def _raw_value(self, node: Dict[str, Any]) -> Optional[str]:
        return (node.get("metafield") or {}).get("value")


class MetaobjectGalleryLister(_PagedLister):
    """Lists images from every upload metaobject."""

    connection = "metaobjects"

    def __init__(self, client: ShopifyClient, metaobject_type: str):
        super().__init__(client)
        self.metaobject_type = metaobject_type

    def _query(self) -> str:
        return METAOBJECTS_QUERY

    def _variables(self) -> Dict[str, Any]:
        return {"type": self.metaobject_type}

    def _raw_value(self, node: Dict[str, Any]) -> Optional[str]:
        return (node.get("field") or {}).get("value")
