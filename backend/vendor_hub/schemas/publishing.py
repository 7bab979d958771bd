"""
Publishing schemas — publish request snapshot, per-image outcomes, publish result.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from vendor_hub.core.constants.publishing import DEFAULT_VENDOR_NAME


class ImageReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_uri: str
    ordinal_index: int


class Uploaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["uploaded"] = "uploaded"
    source: ImageReference
    platform_resource_uri: str


class Skipped(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["skipped"] = "skipped"
    source: ImageReference
    reason: str


class Failed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    source: ImageReference
    error: str


UploadOutcome = Annotated[Union[Uploaded, Skipped, Failed], Field(discriminator="kind")]


def uploaded_in_order(outcomes: List[UploadOutcome]) -> List[Uploaded]:
    """Uploaded outcomes only, in submission (ordinal) order."""
    uploaded = [o for o in outcomes if isinstance(o, Uploaded)]
    return sorted(uploaded, key=lambda o: o.source.ordinal_index)


def _tag_list(tags: Any) -> List[str]:
    """Tags column as a list; a comma-separated string is split."""
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [str(t).strip() for t in tags if t and str(t).strip()]


class ProductPublishRequest(BaseModel):
    """Immutable snapshot of one product for one publish attempt."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    title: str
    description: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    inventory_quantity: int = 0
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    weight: Optional[float] = None
    weight_unit: Optional[str] = None
    vendor_display_name: str = DEFAULT_VENDOR_NAME
    candidate_images: List[ImageReference] = Field(default_factory=list)

    @classmethod
    def from_product_row(cls, row: Dict[str, Any]) -> "ProductPublishRequest":
        """Build the snapshot from a `products` row (vendor joined in as `vendors`)."""
        vendor = row.get("vendors") or {}
        images = row.get("images") or []
        return cls(
            product_id=str(row["id"]),
            title=row.get("title") or "",
            description=row.get("description"),
            price=float(row.get("price") or 0),
            compare_at_price=float(row["compare_at_price"]) if row.get("compare_at_price") else None,
            sku=row.get("sku"),
            barcode=row.get("barcode"),
            inventory_quantity=int(row.get("inventory_quantity") or 0),
            category=row.get("category"),
            tags=_tag_list(row.get("tags")),
            weight=float(row["weight"]) if row.get("weight") else None,
            weight_unit=row.get("weight_unit"),
            vendor_display_name=(
                vendor.get("business_name")
                or row.get("vendor_business_name")
                or DEFAULT_VENDOR_NAME
            ),
            candidate_images=[
                ImageReference(source_uri=uri or "", ordinal_index=i)
                for i, uri in enumerate(images)
            ],
        )


class PublishResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    platform_product_id: Optional[str] = None
    platform_variant_id: Optional[str] = None
    confirmed_image_uris: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "PublishResult":
        return cls(success=False, error=error)


class ModerationOutcome(BaseModel):
    """What an approve/reject action did, for the admin response."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    status: str
    notes: Optional[str] = None
    publish_result: Optional[PublishResult] = None
    outcomes: List[UploadOutcome] = Field(default_factory=list)

    @property
    def published(self) -> bool:
        return bool(self.publish_result and self.publish_result.success)
