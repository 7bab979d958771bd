"""
Moderation schemas — admin approve/reject request and response models.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel


class ApproveRequest(BaseModel):
    admin_notes: Optional[str] = None


class RejectRequest(BaseModel):
    admin_notes: Optional[str] = None


class ModerationResponse(BaseModel):
    success: bool
    status: str
    message: str
    published: Optional[bool] = None
    publish_error: Optional[str] = None
    shopify_product_id: Optional[str] = None
    shopify_variant_id: Optional[str] = None
    images: Optional[List[str]] = None
    skipped_images: Optional[List[Dict[str, str]]] = None
    failed_images: Optional[List[Dict[str, str]]] = None


class ImageCleanupResponse(BaseModel):
    success: bool
    scanned: int
    cleaned: int
    removed: Dict[str, List[str]]
