"""HTTP client for the Shopify Admin GraphQL API."""

import logging
from typing import Any, Dict, Optional

import httpx

from sizyx.core.config import Settings

logger = logging.getLogger(__name__)


class ShopifyAPIError(Exception):
    """Raised when a GraphQL call fails at the transport or GraphQL layer.

    ``userErrors`` inside a successful response are not raised here; each
    caller inspects the mutation payload it asked for.
    """


class ShopifyClient:
    """Thin async wrapper around the Admin GraphQL endpoint.

    One ``httpx.AsyncClient`` is shared for GraphQL calls and for posting
    bytes to staged upload targets. Pass ``http_client`` to inject a
    preconfigured client (tests use ``httpx.MockTransport``).
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.graphql_url = settings.shopify_graphql_url
        self.http = http_client or httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT)

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a GraphQL document and return its ``data`` object.

        Raises:
            ShopifyAPIError: On transport errors, non-2xx status, top-level
                GraphQL ``errors`` or a body without ``data``.
        """
        try:
            response = await self.http.post(
                self.graphql_url,
                json={"query": query, "variables": variables or {}},
                headers={
                    "X-Shopify-Access-Token": self.settings.SHOPIFY_ACCESS_TOKEN,
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            status_code = getattr(e.response, "status_code", None) if hasattr(e, "response") else None
            logger.warning(
                "Shopify GraphQL request failed",
                extra={"error": str(e), "status_code": status_code},
            )
            raise ShopifyAPIError(f"Shopify request failed: {e}") from e
        except ValueError as e:
            raise ShopifyAPIError("Shopify returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise ShopifyAPIError("Shopify returned a malformed body")
        if body.get("errors"):
            raise ShopifyAPIError(f"GraphQL errors: {body['errors']}")
        data = body.get("data")
        if not isinstance(data, dict):
            raise ShopifyAPIError("Shopify response has no data")
        return data

    async def aclose(self) -> None:
        await self.http.aclose()


def format_user_errors(user_errors: list[Dict[str, Any]]) -> str:
    """Join Shopify ``userErrors`` into one readable line."""
    parts = []
    for error in user_errors:
        field = ".".join(error.get("field") or [])
        message = error.get("message", "unknown error")
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts)
