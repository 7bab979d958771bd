"""
Shopify schemas — OAuth install and connection check responses.
"""
from typing import Optional

from pydantic import BaseModel


class ShopifyInstallResponse(BaseModel):
    success: bool
    shop: str
    expires_at: str
    message: str


class ShopifyConnectionResponse(BaseModel):
    success: bool
    shop: Optional[str] = None
    shop_name: Optional[str] = None
    message: str
