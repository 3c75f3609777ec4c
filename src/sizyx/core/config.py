"""Configuration management for the Sizyx upload gateway."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        frozen=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "sizyx"
    SERVICE_VERSION: str = "0.1.0"
    PORT: int = 3000
    CORS_ORIGINS: str = "*"  # Comma-separated

    # Storage Configuration
    STORAGE_BACKEND: Literal["gcs", "shopify"] = "gcs"

    # GCP Configuration
    GCP_PROJECT_ID: str = ""
    GCS_BUCKET_NAME: str = ""
    GCS_PUBLIC_BASE_URL: str = "https://storage.googleapis.com"

    # Shopify Admin API Configuration
    SHOPIFY_STORE_DOMAIN: str = ""  # e.g. my-shop.myshopify.com
    SHOPIFY_ACCESS_TOKEN: str = ""
    SHOPIFY_API_VERSION: str = "2024-10"
    SHOPIFY_METADATA_MODE: Literal["metafield", "metaobject"] = "metafield"
    SHOPIFY_METAFIELD_NAMESPACE: str = "custom"
    SHOPIFY_METAFIELD_KEY: str = "uploaded_images"
    SHOPIFY_METAOBJECT_TYPE: str = "customer_upload"
    SHOPIFY_CREATE_MISSING_CUSTOMERS: bool = True

    # Upload Constraints
    MAX_UPLOAD_MB: int = 5
    MAX_FILES_PER_REQUEST: int = 3

    REQUEST_TIMEOUT: float = 30.0  # seconds for Shopify calls

    @property
    def max_upload_bytes(self) -> int:
        """Convert MAX_UPLOAD_MB to bytes."""
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def shopify_graphql_url(self) -> str:
        return (
            f"https://{self.SHOPIFY_STORE_DOMAIN}/admin/api/"
            f"{self.SHOPIFY_API_VERSION}/graphql.json"
        )


# Singleton settings instance
settings = Settings()
