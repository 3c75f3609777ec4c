"""Pytest configuration and shared fixtures."""

import json
import re
from typing import Any, Dict, Optional

import httpx
import pytest

from sizyx.core.config import Settings
from sizyx.shopify.client import ShopifyClient

SHOP_DOMAIN = "test-shop.myshopify.com"
UPLOAD_HOST = "uploads.example.com"


class FakeShopify:
    """In-memory stand-in for the Shopify Admin GraphQL API.

    Also serves the staged upload targets on ``UPLOAD_HOST``. Every
    GraphQL operation name and every staged POST is appended to ``calls``.
    """

    def __init__(self):
        self.customers: list[Dict[str, Any]] = []
        self.metaobjects: list[Dict[str, Any]] = []
        self.staged_uploads: list[bytes] = []
        self.calls: list[str] = []
        self.user_errors: Dict[str, list] = {}
        self.graphql_errors: Dict[str, list] = {}
        self.http_status: Dict[str, int] = {}
        self.upload_status = 204
        self.image_ready = True

    # Helpers for arranging state

    def add_customer(self, email: str, first_name: str | None = None, images: list[str] | None = None) -> str:
        customer_id = f"gid://shopify/Customer/{len(self.customers) + 1}"
        metafields = {}
        if images is not None:
            metafields["custom.uploaded_images"] = json.dumps(images)
        self.customers.append(
            {
                "id": customer_id,
                "email": email,
                "firstName": first_name,
                "lastName": None,
                "metafields": metafields,
            }
        )
        return customer_id

    def customer(self, email: str) -> Optional[Dict[str, Any]]:
        return next((c for c in self.customers if c["email"] == email), None)

    # Transport

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == UPLOAD_HOST:
            self.calls.append("stagedPost")
            self.staged_uploads.append(request.content)
            return httpx.Response(self.upload_status)

        body = json.loads(request.content)
        operation = re.search(r"(?:query|mutation)\s+(\w+)", body["query"]).group(1)
        self.calls.append(operation)

        if operation in self.http_status:
            return httpx.Response(self.http_status[operation], json={"errors": "boom"})
        if operation in self.graphql_errors:
            return httpx.Response(200, json={"errors": self.graphql_errors[operation]})

        data = getattr(self, f"_op_{operation}")(body.get("variables") or {})
        return httpx.Response(200, json={"data": data})

    def _errors(self, operation: str) -> list:
        return self.user_errors.get(operation, [])

    def _op_findCustomer(self, variables):
        # Fuzzy like Shopify: any email containing the term matches, in insertion order
        term = re.search(r'email:"((?:[^"\\]|\\.)+)"', variables["query"]).group(1)
        term = re.sub(r"\\(.)", r"\1", term).lower()
        matches = [c for c in self.customers if term in c["email"].lower()]
        return {"customers": {"edges": [{"node": self._public(c)} for c in matches[: variables["first"]]]}}

    def _op_createCustomer(self, variables):
        errors = self._errors("createCustomer")
        if errors:
            return {"customerCreate": {"customer": None, "userErrors": errors}}
        customer_input = variables["input"]
        self.add_customer(customer_input["email"], customer_input.get("firstName"))
        created = self.customers[-1]
        created["lastName"] = customer_input.get("lastName")
        return {
            "customerCreate": {
                "customer": {"id": created["id"], "email": created["email"]},
                "userErrors": [],
            }
        }

    def _op_stagedUploadsCreate(self, variables):
        errors = self._errors("stagedUploadsCreate")
        if errors:
            return {"stagedUploadsCreate": {"stagedTargets": [], "userErrors": errors}}
        staged_input = variables["input"][0]
        n = len(self.staged_uploads) + 1
        filename = staged_input["filename"]
        return {
            "stagedUploadsCreate": {
                "stagedTargets": [
                    {
                        "url": f"https://{UPLOAD_HOST}/stage/{n}",
                        "resourceUrl": f"https://{UPLOAD_HOST}/stage/{n}/{filename}",
                        "parameters": [
                            {"name": "key", "value": f"tmp/{n}/{filename}"},
                            {"name": "Content-Type", "value": staged_input["mimeType"]},
                        ],
                    }
                ],
                "userErrors": [],
            }
        }

    def _op_fileCreate(self, variables):
        errors = self._errors("fileCreate")
        if errors:
            return {"fileCreate": {"files": [], "userErrors": errors}}
        source = variables["files"][0]["originalSource"]
        filename = source.rsplit("/", 1)[-1]
        image = {"url": f"https://cdn.shopify.com/s/files/{filename}"} if self.image_ready else None
        return {
            "fileCreate": {
                "files": [
                    {
                        "id": f"gid://shopify/MediaImage/{len(self.staged_uploads)}",
                        "fileStatus": "READY" if self.image_ready else "UPLOADED",
                        "preview": {"image": image},
                        "image": image,
                    }
                ],
                "userErrors": [],
            }
        }

    def _op_metafieldsSet(self, variables):
        errors = self._errors("metafieldsSet")
        if errors:
            return {"metafieldsSet": {"metafields": [], "userErrors": errors}}
        written = []
        for metafield in variables["metafields"]:
            owner = next(c for c in self.customers if c["id"] == metafield["ownerId"])
            full_key = f"{metafield['namespace']}.{metafield['key']}"
            owner["metafields"][full_key] = metafield["value"]
            written.append({"id": "gid://shopify/Metafield/1", "key": metafield["key"], "namespace": metafield["namespace"]})
        return {"metafieldsSet": {"metafields": written, "userErrors": []}}

    def _op_metaobjectCreate(self, variables):
        errors = self._errors("metaobjectCreate")
        if errors:
            return {"metaobjectCreate": {"metaobject": None, "userErrors": errors}}
        metaobject = variables["metaobject"]
        record = {
            "id": f"gid://shopify/Metaobject/{len(self.metaobjects) + 1}",
            "type": metaobject["type"],
            "fields": {field["key"]: field["value"] for field in metaobject["fields"]},
        }
        self.metaobjects.append(record)
        return {"metaobjectCreate": {"metaobject": {"id": record["id"], "handle": "upload"}, "userErrors": []}}

    def _page(self, items, variables):
        start = int(variables.get("after") or 0)
        end = start + variables["first"]
        return items[start:end], {"hasNextPage": end < len(items), "endCursor": str(end)}

    def _op_customerImages(self, variables):
        full_key = f"{variables['namespace']}.{variables['key']}"
        page, page_info = self._page(self.customers, variables)
        edges = []
        for customer in page:
            value = customer["metafields"].get(full_key)
            edges.append({"node": {"id": customer["id"], "metafield": {"value": value} if value else None}})
        return {"customers": {"edges": edges, "pageInfo": page_info}}

    def _op_uploadMetaobjects(self, variables):
        matching = [m for m in self.metaobjects if m["type"] == variables["type"]]
        page, page_info = self._page(matching, variables)
        edges = [
            {"node": {"id": m["id"], "field": {"value": m["fields"].get("images")}}}
            for m in page
        ]
        return {"metaobjects": {"edges": edges, "pageInfo": page_info}}

    @staticmethod
    def _public(customer):
        return {k: customer[k] for k in ("id", "email", "firstName", "lastName")}


@pytest.fixture
def shopify_settings() -> Settings:
    """Settings for the Shopify backend."""
    return Settings(
        _env_file=None,
        STORAGE_BACKEND="shopify",
        SHOPIFY_STORE_DOMAIN=SHOP_DOMAIN,
        SHOPIFY_ACCESS_TOKEN="shpat_test",
    )


@pytest.fixture
def gcs_settings() -> Settings:
    """Settings for the GCS backend."""
    return Settings(
        _env_file=None,
        STORAGE_BACKEND="gcs",
        GCS_BUCKET_NAME="test-bucket",
        GCP_PROJECT_ID="test-project",
    )


@pytest.fixture
def fake_shopify() -> FakeShopify:
    return FakeShopify()


@pytest.fixture
def shopify_client(shopify_settings, fake_shopify) -> ShopifyClient:
    """Shopify client whose HTTP traffic goes to ``fake_shopify``."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_shopify.handler))
    return ShopifyClient(shopify_settings, http_client=http_client)
