"""Tests for the upload and gallery HTTP endpoints."""

import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from sizyx.main import app
from sizyx.services.factory import build_gallery_lister, build_pipeline


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def shopify_pipeline(shopify_settings, shopify_client):
    """Route uploads through the fake Shopify API."""
    pipeline = build_pipeline(shopify_settings, shopify_client)
    with patch("sizyx.api.routes_upload.get_upload_pipeline", return_value=pipeline):
        yield pipeline


@pytest.fixture
def shopify_gallery(shopify_settings, shopify_client):
    lister = build_gallery_lister(shopify_settings, shopify_client)
    with patch("sizyx.api.routes_gallery.get_gallery_lister", return_value=lister):
        yield lister


def _jpeg(name="photo.jpg", size=10 * 1024):
    return (name, io.BytesIO(b"\xff" * size), "image/jpeg")


def test_upload_single_file(client, shopify_pipeline, fake_shopify):
    response = client.post(
        "/upload",
        files=[("photos", _jpeg())],
        data={"customer_email": "a@example.com"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["images"] == ["https://cdn.shopify.com/s/files/photo.jpg"]
    assert body["url"] == "https://cdn.shopify.com/s/files/photo.jpg"
    assert len(fake_shopify.customers) == 1


def test_upload_multiple_files_in_order(client, shopify_pipeline, fake_shopify):
    response = client.post(
        "/upload",
        files=[("photos", _jpeg("a.jpg")), ("photos", _jpeg("b.jpg")), ("photos", _jpeg("c.jpg"))],
        data={"customer_email": "a@example.com", "customer_name": "Ann Lee", "caption": "Trip"},
    )

    assert response.status_code == 200
    assert response.json()["images"] == [
        "https://cdn.shopify.com/s/files/a.jpg",
        "https://cdn.shopify.com/s/files/b.jpg",
        "https://cdn.shopify.com/s/files/c.jpg",
    ]
    assert fake_shopify.customer("a@example.com")["firstName"] == "Ann"


def test_upload_accepts_single_photo_field(client, shopify_pipeline):
    response = client.post(
        "/upload",
        files=[("photo", _jpeg())],
        data={"customer_email": "a@example.com"},
    )

    assert response.status_code == 200
    assert len(response.json()["images"]) == 1


def test_upload_missing_email(client, shopify_pipeline, fake_shopify):
    response = client.post("/upload", files=[("photos", _jpeg())], data={})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "email" in response.json()["message"].lower()
    assert fake_shopify.calls == []


def test_upload_no_files(client, shopify_pipeline, fake_shopify):
    response = client.post("/upload", data={"customer_email": "a@example.com"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "No file uploaded."}
    assert fake_shopify.calls == []


def test_upload_too_many_files(client, shopify_pipeline, fake_shopify):
    files = [("photos", _jpeg(f"{n}.jpg")) for n in range(4)]

    response = client.post("/upload", files=files, data={"customer_email": "a@example.com"})

    assert response.status_code == 400
    assert fake_shopify.calls == []


def test_upload_oversized_file(client, shopify_pipeline, fake_shopify):
    """A file over the 5MB ceiling is rejected before any upstream call."""
    files = [("photos", _jpeg("small.jpg")), ("photos", _jpeg("big.jpg", size=5 * 1024 * 1024 + 1))]

    response = client.post("/upload", files=files, data={"customer_email": "a@example.com"})

    assert response.status_code == 400
    assert "size" in response.json()["message"].lower()
    assert fake_shopify.calls == []


def test_upload_binary_failure(client, shopify_pipeline, fake_shopify):
    fake_shopify.upload_status = 403

    response = client.post(
        "/upload", files=[("photos", _jpeg())], data={"customer_email": "a@example.com"}
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Upload failed"}
    assert "metafieldsSet" not in fake_shopify.calls


def test_upload_lookup_only_missing_customer(client, shopify_pipeline, fake_shopify):
    shopify_pipeline.resolver.create_missing = False

    response = client.post(
        "/upload", files=[("photos", _jpeg())], data={"customer_email": "nobody@example.com"}
    )

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert "stagedUploadsCreate" not in fake_shopify.calls


def test_upload_configuration_error(client):
    with patch(
        "sizyx.api.routes_upload.get_upload_pipeline",
        side_effect=ValueError("SHOPIFY_STORE_DOMAIN and SHOPIFY_ACCESS_TOKEN must be configured"),
    ):
        response = client.post(
            "/upload", files=[("photos", _jpeg())], data={"customer_email": "a@example.com"}
        )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Storage configuration error"}


def test_upload_unexpected_error(client):
    pipeline = MagicMock()
    pipeline.run = AsyncMock(side_effect=RuntimeError("boom"))
    with patch("sizyx.api.routes_upload.get_upload_pipeline", return_value=pipeline):
        response = client.post(
            "/upload", files=[("photos", _jpeg())], data={"customer_email": "a@example.com"}
        )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}


def test_gallery_empty(client, shopify_gallery):
    response = client.get("/gallery")

    assert response.status_code == 200
    assert response.json() == {"success": True, "images": []}


def test_gallery_after_upload(client, shopify_pipeline, shopify_gallery):
    client.post("/upload", files=[("photos", _jpeg("a.jpg"))], data={"customer_email": "a@example.com"})
    client.post("/upload", files=[("photos", _jpeg("b.jpg"))], data={"customer_email": "b@example.com"})

    response = client.get("/gallery")

    assert response.json()["images"] == [
        "https://cdn.shopify.com/s/files/a.jpg",
        "https://cdn.shopify.com/s/files/b.jpg",
    ]


def test_gallery_failure(client, shopify_gallery, fake_shopify):
    fake_shopify.http_status["customerImages"] = 500

    response = client.get("/gallery")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to load gallery"}
