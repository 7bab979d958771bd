"""
Constants package — re-exports from domain-specific modules.

Usage:
    from vendor_hub.core.constants.publishing import STATUS_APPROVED
    # or:
    from vendor_hub.core.constants import publishing
"""

from vendor_hub.core.constants import publishing
from vendor_hub.core.constants.publishing import (
    STATUS_DRAFT,
    STATUS_PENDING,
    STATUS_APPROVED,
    STATUS_REJECTED,
    PUBLISH_STATE_PUBLISHED,
    PUBLISH_STATE_FAILED,
    DEFAULT_VENDOR_NAME,
    DEFAULT_WEIGHT_UNIT,
)

__all__ = [
    "publishing",
    "STATUS_DRAFT",
    "STATUS_PENDING",
    "STATUS_APPROVED",
    "STATUS_REJECTED",
    "PUBLISH_STATE_PUBLISHED",
    "PUBLISH_STATE_FAILED",
    "DEFAULT_VENDOR_NAME",
    "DEFAULT_WEIGHT_UNIT",
]
