import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vendor_hub.core.middleware import apply_cors
from vendor_hub.routes.health import router as health_router
from vendor_hub.routes.moderation import router as moderation_router
from vendor_hub.routes.shopify import router as shopify_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler.

    On startup:
    - Drop stored Shopify credentials that are past their expiry
    """
    logger.info("=== Vendor Hub Starting ===")

    try:
        from vendor_hub.container import get_credential_store
        removed = await get_credential_store().purge_expired()
        logger.info(f"Expired Shopify credentials purged: {removed}")
    except Exception as e:
        logger.warning(f"Could not purge expired credentials: {e}")

    logger.info("=== Vendor Hub Ready ===")

    yield

    logger.info("=== Vendor Hub Shutting Down ===")


app = FastAPI(title="Vendor Hub Backend", lifespan=lifespan)
logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

apply_cors(app)

app.include_router(health_router)
app.include_router(moderation_router)
app.include_router(shopify_router)
