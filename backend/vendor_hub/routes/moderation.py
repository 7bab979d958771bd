"""
Moderation routes — admin approve/reject of vendor product submissions.

Provides:
- POST /api/v1/admin/products/{id}/approve       – approve and publish to Shopify
- POST /api/v1/admin/products/{id}/reject        – reject with feedback
- POST /api/v1/admin/products/images/cleanup     – strip unresolved stored image URIs
"""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from vendor_hub.container import get_image_maintenance_service, get_publish_orchestrator
from vendor_hub.core.auth import require_admin
from vendor_hub.core.exceptions import InvalidStatusTransition, ProductNotFoundError
from vendor_hub.schemas.moderation import (
    ApproveRequest,
    ImageCleanupResponse,
    ModerationResponse,
    RejectRequest,
)
from vendor_hub.schemas.publishing import Failed, ModerationOutcome, Skipped
from vendor_hub.services.image_maintenance import ImageMaintenanceService
from vendor_hub.services.publish_orchestrator import PublishOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin/products", tags=["moderation"])


def _get_orchestrator() -> PublishOrchestrator:
    return get_publish_orchestrator()


def _get_maintenance_service() -> ImageMaintenanceService:
    return get_image_maintenance_service()


def _to_response(outcome: ModerationOutcome) -> ModerationResponse:
    result = outcome.publish_result
    if result is None:
        return ModerationResponse(
            success=True,
            status=outcome.status,
            message=f"Product {outcome.status}",
        )

    skipped = [
        {"source": o.source.source_uri, "reason": o.reason}
        for o in outcome.outcomes if isinstance(o, Skipped)
    ]
    failed = [
        {"source": o.source.source_uri, "error": o.error}
        for o in outcome.outcomes if isinstance(o, Failed)
    ]
    if result.success:
        message = "Product approved and published to Shopify"
    else:
        message = f"Product approved, but Shopify publish failed: {result.error}"

    return ModerationResponse(
        success=True,
        status=outcome.status,
        message=message,
        published=result.success,
        publish_error=result.error,
        shopify_product_id=result.platform_product_id,
        shopify_variant_id=result.platform_variant_id,
        images=result.confirmed_image_uris,
        skipped_images=skipped,
        failed_images=failed,
    )


@router.post("/{product_id}/approve", response_model=ModerationResponse)
async def approve_product(
    product_id: str,
    payload: Optional[ApproveRequest] = Body(default=None),
    current_user: dict = Depends(require_admin),
):
    """Approve a product; publishing to Shopify is attempted but never blocks approval."""
    try:
        logger.info(f"Approve requested: product={product_id} by={current_user.get('user_id')}")
        notes = payload.admin_notes if payload else None
        outcome = await _get_orchestrator().approve_product(product_id, notes)
        return _to_response(outcome)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Approve failed: product={product_id} error={e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{product_id}/reject", response_model=ModerationResponse)
async def reject_product(
    product_id: str,
    payload: Optional[RejectRequest] = Body(default=None),
    current_user: dict = Depends(require_admin),
):
    """Reject a product with operator feedback. Nothing is published."""
    try:
        logger.info(f"Reject requested: product={product_id} by={current_user.get('user_id')}")
        notes = payload.admin_notes if payload else None
        outcome = await _get_orchestrator().reject_product(product_id, notes)
        return _to_response(outcome)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Reject failed: product={product_id} error={e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/images/cleanup", response_model=ImageCleanupResponse)
async def cleanup_stored_images(current_user: dict = Depends(require_admin)):
    """Remove blob:, data:, local and malformed URIs from stored image lists."""
    try:
        return await _get_maintenance_service().clean_stored_images()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Image cleanup failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
