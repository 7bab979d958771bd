"""
Unit tests for the custom exception hierarchy.

Verifies inheritance chains, attribute assignment, and message formatting
for all exception classes in vendor_hub.core.exceptions.
"""
import pytest

from vendor_hub.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CatalogCreateError,
    ConnectionTimeoutError,
    CredentialAcquisitionError,
    ExternalAPIError,
    ImageUploadError,
    InvalidSource,
    InvalidStatusTransition,
    NonRetryableError,
    ProductNotFoundError,
    RateLimitError,
    RetryableError,
    StagingRequestFailed,
    TransferFailed,
    ValidationError,
    VendorHubException,
)


pytestmark = pytest.mark.unit


class TestBaseException:

    def test_is_exception(self):
        assert issubclass(VendorHubException, Exception)

    def test_message_preserved(self):
        assert str(VendorHubException("something went wrong")) == "something went wrong"


class TestRetryableErrors:

    def test_external_api_error_attributes(self):
        exc = ExternalAPIError(service="Shopify", message="timeout", status_code=504)
        assert isinstance(exc, RetryableError)
        assert exc.service == "Shopify"
        assert exc.status_code == 504
        assert str(exc) == "Shopify API error: timeout"

    def test_rate_limit_error(self):
        exc = RateLimitError("Shopify", retry_after=5)
        assert exc.status_code == 429
        assert exc.retry_after == 5
        assert "Retry after 5s" in str(exc)

    def test_connection_timeout_is_retryable(self):
        assert issubclass(ConnectionTimeoutError, RetryableError)

    def test_catalog_create_error_message(self):
        exc = CatalogCreateError(422, '{"errors":{"title":["can\'t be blank"]}}')
        assert isinstance(exc, ExternalAPIError)
        assert exc.status_code == 422
        assert str(exc).startswith("Shopify API error: 422 - ")
        assert "can't be blank" in exc.body


class TestNonRetryableErrors:

    @pytest.mark.parametrize("cls", [
        ValidationError,
        ProductNotFoundError,
        AuthenticationError,
        ImageUploadError,
    ])
    def test_non_retryable_branch(self, cls):
        assert issubclass(cls, NonRetryableError)
        assert not issubclass(cls, RetryableError)

    def test_credential_errors_are_authentication_errors(self):
        assert issubclass(CredentialAcquisitionError, AuthenticationError)
        assert issubclass(AuthorizationError, AuthenticationError)

    def test_invalid_status_transition(self):
        exc = InvalidStatusTransition("prod-001", "draft", "approve")
        assert isinstance(exc, ValidationError)
        assert exc.current_status == "draft"
        assert str(exc) == "Cannot approve product prod-001 with status 'draft'"


class TestImageUploadErrors:

    @pytest.mark.parametrize("cls", [InvalidSource, StagingRequestFailed, TransferFailed])
    def test_carry_source_uri(self, cls):
        exc = cls("https://images.vendor.test/a.jpg", "HTTP 404")
        assert isinstance(exc, ImageUploadError)
        assert exc.source_uri == "https://images.vendor.test/a.jpg"
        assert str(exc) == "HTTP 404"
