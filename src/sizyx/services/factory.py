"""Storage backend selection based on settings."""

from functools import lru_cache

from sizyx.core.config import Settings, settings
from sizyx.services.pipeline import UploadPipeline
from sizyx.shopify.client import ShopifyClient
from sizyx.shopify.customers import IdentityResolver
from sizyx.shopify.files import ShopifyFileStore
from sizyx.shopify.gallery import CustomerGalleryLister, MetaobjectGalleryLister
from sizyx.shopify.metadata import MetafieldAttacher, MetaobjectAttacher
from sizyx.storage.base import GalleryLister
from sizyx.storage.gcs import GCSStorageBackend


def build_pipeline(config: Settings, client: ShopifyClient | None = None) -> UploadPipeline:
    """Wire the upload pipeline for the configured backend.

    Raises:
        ValueError: If the backend's required settings are missing.
    """
    if config.STORAGE_BACKEND == "gcs":
        return UploadPipeline(backend=GCSStorageBackend(config))

    client = client or _shopify_client(config)
    if config.SHOPIFY_METADATA_MODE == "metaobject":
        attacher = MetaobjectAttacher(client, config.SHOPIFY_METAOBJECT_TYPE)
    else:
        attacher = MetafieldAttacher(
            client, config.SHOPIFY_METAFIELD_NAMESPACE, config.SHOPIFY_METAFIELD_KEY
        )
    return UploadPipeline(
        backend=ShopifyFileStore(client),
        resolver=IdentityResolver(client, create_missing=config.SHOPIFY_CREATE_MISSING_CUSTOMERS),
        attacher=attacher,
    )


def build_gallery_lister(config: Settings, client: ShopifyClient | None = None) -> GalleryLister:
    """Build the gallery lister for the configured backend."""
    if config.STORAGE_BACKEND == "gcs":
        return GCSStorageBackend(config)

    client = client or _shopify_client(config)
    if config.SHOPIFY_METADATA_MODE == "metaobject":
        return MetaobjectGalleryLister(client, config.SHOPIFY_METAOBJECT_TYPE)
    return CustomerGalleryLister(
        client, config.SHOPIFY_METAFIELD_NAMESPACE, config.SHOPIFY_METAFIELD_KEY
    )


def _shopify_client(config: Settings) -> ShopifyClient:
    if not config.SHOPIFY_STORE_DOMAIN or not config.SHOPIFY_ACCESS_TOKEN:
        raise ValueError("SHOPIFY_STORE_DOMAIN and SHOPIFY_ACCESS_TOKEN must be configured")
    return ShopifyClient(config)


@lru_cache
def get_shopify_client() -> ShopifyClient:
    """Process-wide Shopify client shared by the pipeline and the gallery."""
    return _shopify_client(settings)


def _shared_client() -> ShopifyClient | None:
    return get_shopify_client() if settings.STORAGE_BACKEND == "shopify" else None


@lru_cache
def get_upload_pipeline() -> UploadPipeline:
    """Return the process-wide upload pipeline for the configured backend."""
    return build_pipeline(settings, _shared_client())


@lru_cache
def get_gallery_lister() -> GalleryLister:
    """Return the process-wide gallery lister for the configured backend."""
    return build_gallery_lister(settings, _shared_client())


async def close_shopify_client() -> None:
    """Close the shared Shopify client, if one was created, and drop cached wiring."""
    if get_shopify_client.cache_info().currsize:
        await get_shopify_client().aclose()
    get_shopify_client.cache_clear()
    get_upload_pipeline.cache_clear()
    get_gallery_lister.cache_clear()
