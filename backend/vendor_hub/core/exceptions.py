"""
Custom exception hierarchy for Vendor Hub.

Exceptions are categorized as:
- RetryableError: Transient errors where a later attempt might succeed
- NonRetryableError: Permanent errors that need a data or config fix

The publishing pipeline never retries on its own beyond the single
401-triggered credential refresh; the categorization tells a calling
layer (or an operator) whether trying the publish again is worthwhile.
"""


class VendorHubException(Exception):
    """Base exception for Vendor Hub."""
    pass


# ============================================
# RETRYABLE ERRORS
# ============================================
class RetryableError(VendorHubException):
    """
    Base class for errors where a later retry might succeed.

    - Network timeouts
    - Rate limits
    - Temporary platform unavailability
    """
    pass


class ExternalAPIError(RetryableError):
    """
    Error from an external API (Shopify).

    Typically transient - the external service might recover.
    """
    def __init__(self, service: str, message: str, status_code: int = None):
        self.service = service
        self.status_code = status_code
        self.detail = message
        super().__init__(f"{service} API error: {message}")


class RateLimitError(ExternalAPIError):
    """Rate limit exceeded (HTTP 429)."""
    def __init__(self, service: str, retry_after: int = 2):
        self.retry_after = retry_after
        super().__init__(service, f"rate limited. Retry after {retry_after}s", status_code=429)


class ConnectionTimeoutError(RetryableError):
    """Connection or timeout error - typically transient."""
    pass


class CatalogCreateError(ExternalAPIError):
    """
    The catalog-create call was rejected by the platform.

    Fatal for the current publish attempt. No catalog entry exists, so
    nothing persisted before the attempt is touched.
    """
    def __init__(self, status_code: int, body: str):
        self.body = body
        super().__init__("Shopify", f"{status_code} - {body}", status_code=status_code)


# ============================================
# NON-RETRYABLE ERRORS
# ============================================
class NonRetryableError(VendorHubException):
    """
    Base class for errors where retrying won't help.

    - Validation failures
    - Missing data
    - Authentication errors (need config fix)
    """
    pass


class ValidationError(NonRetryableError):
    """Invalid input data - retrying won't help."""
    pass


class ProductNotFoundError(NonRetryableError):
    """Product not found - permanent failure."""
    pass


class InvalidStatusTransition(ValidationError):
    """The requested moderation action is not allowed from the current status."""
    def __init__(self, product_id: str, current_status: str, action: str):
        self.product_id = product_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} product {product_id} with status '{current_status}'"
        )


class AuthenticationError(NonRetryableError):
    """
    API authentication failed.

    Needs configuration fix, not retry.
    """
    pass


class CredentialAcquisitionError(AuthenticationError):
    """
    No usable platform credential: the cached one is missing or rejected
    and the credential exchange failed. Nothing can proceed without one.
    """
    pass


class AuthorizationError(AuthenticationError):
    """The platform rejected the request again after a fresh credential was exchanged."""
    pass


# ============================================
# PER-IMAGE UPLOAD ERRORS
# ============================================
class ImageUploadError(NonRetryableError):
    """Base class for errors scoped to a single image; never aborts a batch."""
    def __init__(self, source_uri: str, message: str):
        self.source_uri = source_uri
        super().__init__(message)


class InvalidSource(ImageUploadError):
    """Source cannot be fetched server-side (local, blob/data URI, loopback, malformed)."""
    pass


class StagingRequestFailed(ImageUploadError):
    """The platform refused or failed to issue a staging target."""
    pass


class TransferFailed(ImageUploadError):
    """Fetching the source bytes or the multipart transfer to the staging target failed."""
    pass
