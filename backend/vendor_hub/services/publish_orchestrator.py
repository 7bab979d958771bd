"""
Publish orchestrator — moderation actions for vendor products.

Status machine: draft -> pending -> {approved, rejected}. An approved
product carries a publish sub-state (published | publish_failed) rather
than another top-level status.

Approval and publication are decoupled: approve always persists
status="approved", then records whatever the publish attempt produced.
Publish errors never escape approve_product; persistence errors do.
"""
import logging
from typing import Any, Dict, List, Optional

from vendor_hub.clients.shopify_client import ShopifyClient
from vendor_hub.core.constants.publishing import (
    APPROVABLE_STATUSES,
    DEFAULT_REJECTION_NOTE,
    PUBLISH_FAILURE_NOTE_PREFIX,
    PUBLISH_STATE_FAILED,
    PUBLISH_STATE_PUBLISHED,
    REJECTABLE_STATUSES,
    STATUS_APPROVED,
    STATUS_REJECTED,
)
from vendor_hub.core.exceptions import InvalidStatusTransition
from vendor_hub.db.product_store import ProductStore
from vendor_hub.schemas.publishing import (
    ModerationOutcome,
    ProductPublishRequest,
    PublishResult,
    UploadOutcome,
)
from vendor_hub.services.catalog_publisher import CatalogPublisher
from vendor_hub.services.image_batch import ImageBatchProcessor
from vendor_hub.services.token_manager import TokenLifecycleManager

logger = logging.getLogger("publish_orchestrator")


def publish_failure_note(error: str, operator_notes: Optional[str] = None) -> str:
    """Operator-visible note for a failed publish; keeps the platform error verbatim."""
    if operator_notes:
        return f"{operator_notes}\n\nShopify publish failed: {error}"
    return f"{PUBLISH_FAILURE_NOTE_PREFIX}: {error}"


class PublishOrchestrator:
    def __init__(
        self,
        product_store: ProductStore,
        token_manager: TokenLifecycleManager,
        batch_processor: ImageBatchProcessor,
        publisher: CatalogPublisher,
        shopify_client: ShopifyClient,
    ) -> None:
        self._products = product_store
        self._tokens = token_manager
        self._batch = batch_processor
        self._publisher = publisher
        self._shopify = shopify_client

    async def approve_product(
        self, product_id: str, operator_notes: Optional[str] = None
    ) -> ModerationOutcome:
        row = await self._products.get_product(product_id)
        self._ensure_approvable(product_id, row)

        outcomes: List[UploadOutcome] = []
        try:
            result, outcomes = await self._publish(row)
        except Exception as exc:
            logger.exception("publish attempt crashed product_id=%s", product_id)
            result = PublishResult.failure(str(exc) or type(exc).__name__)

        if result.success:
            notes = operator_notes
            await self._products.update_product_status(
                product_id, STATUS_APPROVED, notes=notes, publish_state=PUBLISH_STATE_PUBLISHED
            )
            await self._record_success(product_id, result)
            logger.info(
                "product approved and published product_id=%s shopify_product_id=%s",
                product_id, result.platform_product_id,
            )
        else:
            notes = publish_failure_note(result.error or "unknown error", operator_notes)
            await self._products.update_product_status(
                product_id, STATUS_APPROVED, notes=notes, publish_state=PUBLISH_STATE_FAILED
            )
            logger.warning(
                "product approved, publish failed product_id=%s error=%s",
                product_id, result.error,
            )

        return ModerationOutcome(
            product_id=product_id,
            status=STATUS_APPROVED,
            notes=notes,
            publish_result=result,
            outcomes=outcomes,
        )

    async def reject_product(
        self, product_id: str, operator_notes: Optional[str] = None
    ) -> ModerationOutcome:
        row = await self._products.get_product(product_id)
        current = row.get("status")
        if current not in REJECTABLE_STATUSES:
            raise InvalidStatusTransition(product_id, current, "reject")

        notes = operator_notes or DEFAULT_REJECTION_NOTE
        await self._products.update_product_status(product_id, STATUS_REJECTED, notes=notes)
        logger.info("product rejected product_id=%s", product_id)
        return ModerationOutcome(product_id=product_id, status=STATUS_REJECTED, notes=notes)

    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_approvable(product_id: str, row: Dict[str, Any]) -> None:
        current = row.get("status")
        if current not in APPROVABLE_STATUSES:
            raise InvalidStatusTransition(product_id, current, "approve")
        # Re-approving only makes sense as a retry of a failed publish
        if current == STATUS_APPROVED and row.get("publish_state") != PUBLISH_STATE_FAILED:
            raise InvalidStatusTransition(product_id, current, "approve")

    async def _publish(self, row: Dict[str, Any]):
        request = ProductPublishRequest.from_product_row(row)
        lease = await self._tokens.lease(self._shopify.storefront_id)
        outcomes = await self._batch.process(request.candidate_images, lease)
        result = await self._publisher.publish(request, outcomes, lease)
        return result, outcomes

    async def _record_success(self, product_id: str, result: PublishResult) -> None:
        await self._products.set_platform_ids(
            product_id, result.platform_product_id, result.platform_variant_id
        )
        if result.confirmed_image_uris:
            await self._products.update_product_images(product_id, result.confirmed_image_uris)
