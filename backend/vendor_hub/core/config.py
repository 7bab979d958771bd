import json
import os
from typing import Optional
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


class Settings(BaseModel):
    # Supabase (persistence + admin sessions)
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_service_role_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    supabase_jwt_secret: str | None = os.getenv("SUPABASE_JWT_SECRET")

    # Shopify storefront (one per deployment)
    shopify_store_domain: str | None = os.getenv("SHOPIFY_STORE_DOMAIN")
    shopify_api_version: str = os.getenv("SHOPIFY_API_VERSION", "2024-10")

    # Shopify app identity used for the credential exchange
    shopify_client_id: Optional[str] = os.getenv("SHOPIFY_CLIENT_ID")
    shopify_client_secret: Optional[str] = os.getenv("SHOPIFY_CLIENT_SECRET")
    shopify_scopes: str = os.getenv("SHOPIFY_SCOPES", "read_products,write_products")
    shopify_redirect_uri: Optional[str] = os.getenv("SHOPIFY_REDIRECT_URI")

    # Stored tokens are considered expired after this many days unless the
    # exchange response says otherwise
    shopify_token_ttl_days: int = int(os.getenv("SHOPIFY_TOKEN_TTL_DAYS", "30"))

    # Per-call timeouts (seconds)
    shopify_probe_timeout: float = float(os.getenv("SHOPIFY_PROBE_TIMEOUT", "5"))
    shopify_exchange_timeout: float = float(os.getenv("SHOPIFY_EXCHANGE_TIMEOUT", "20"))
    shopify_request_timeout: float = float(os.getenv("SHOPIFY_REQUEST_TIMEOUT", "30"))
    shopify_transfer_timeout: float = float(os.getenv("SHOPIFY_TRANSFER_TIMEOUT", "60"))

    # Hosts whose images are already on the platform and are never re-uploaded
    # Example: ["cdn.shopify.com", "shopify-staged-uploads.storage.googleapis.com"]
    shopify_resource_domains: list[str] = json.loads(
        os.getenv(
            "SHOPIFY_RESOURCE_DOMAINS",
            '["cdn.shopify.com", "shopify-staged-uploads.storage.googleapis.com"]',
        )
    )
    shopify_upload_size_estimate: int = int(os.getenv("SHOPIFY_UPLOAD_SIZE_ESTIMATE", "100000"))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = Settings()
