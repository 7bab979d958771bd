"""
Staged upload client — moves one external image onto Shopify's own storage.

Two-phase protocol:
1. stagedUploadsCreate (GraphQL, authenticated via the request executor)
   returns a staging URL, a resource URL and an ordered list of form
   parameters.
2. The source bytes are fetched and POSTed as multipart form data to the
   staging URL. The parameters go first, in the order Shopify returned
   them, and the file part last; the staging URL carries its own
   authorization so no Shopify token is attached.

The resource URL is only handed back after the transfer succeeded.
"""
import logging
import mimetypes
import posixpath
from typing import Any, Dict, List
from urllib.parse import unquote, urlsplit

import httpx

from vendor_hub.clients.shopify_client import RequestSpec, ShopifyClient
from vendor_hub.core.config import Settings
from vendor_hub.core.constants.publishing import (
    DEFAULT_IMAGE_FILENAME,
    DEFAULT_IMAGE_MIME_TYPE,
    MAX_SOURCE_REDIRECTS,
    STAGED_UPLOAD_FILE_FIELD,
    STAGED_UPLOAD_HTTP_METHOD,
    STAGED_UPLOAD_RESOURCE,
    STAGED_UPLOADS_CREATE_MUTATION,
)
from vendor_hub.core.exceptions import (
    InvalidSource,
    StagingRequestFailed,
    TransferFailed,
    VendorHubException,
)
from vendor_hub.schemas.credentials import CredentialLease
from vendor_hub.services.request_executor import ResilientRequestExecutor
from vendor_hub.utils.image_sources import is_platform_hosted, unfetchable_reason

logger = logging.getLogger("staged_upload")


def filename_for(source_uri: str) -> str:
    """Basename of the URL path, or a default when the path has none."""
    path = unquote(urlsplit(source_uri).path or "")
    name = posixpath.basename(path.rstrip("/")) if path else ""
    return name or DEFAULT_IMAGE_FILENAME


def mime_type_for(filename: str) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    if guessed and guessed.startswith("image/"):
        return guessed
    return DEFAULT_IMAGE_MIME_TYPE


class StagedUploadClient:
    def __init__(
        self,
        client: ShopifyClient,
        executor: ResilientRequestExecutor,
        settings: Settings,
    ) -> None:
        self._client = client
        self._executor = executor
        self._resource_domains = list(settings.shopify_resource_domains)
        self._request_timeout = settings.shopify_request_timeout
        self._transfer_timeout = settings.shopify_transfer_timeout
        self._size_estimate = settings.shopify_upload_size_estimate

    async def upload(self, source_uri: str, lease: CredentialLease) -> str:
        """
        Return the platform resource URI for `source_uri`.

        Platform-hosted sources come back unchanged without any network call.

        Raises:
            InvalidSource: the server cannot fetch this URI
            StagingRequestFailed: phase 1 was refused or returned no target
            TransferFailed: fetching the source or the multipart POST failed
        """
        if is_platform_hosted(source_uri, self._resource_domains):
            logger.info("image already on platform uri=%s", source_uri)
            return source_uri

        reason = unfetchable_reason(source_uri)
        if reason is not None:
            raise InvalidSource(source_uri, reason)

        filename = filename_for(source_uri)
        mime_type = mime_type_for(filename)

        target = await self._request_target(source_uri, filename, mime_type, lease)
        content = await self._fetch_source(source_uri)
        await self._transfer(source_uri, target, filename, mime_type, content)

        logger.info(
            "staged upload complete source=%s resource_url=%s",
            source_uri, target["resourceUrl"],
        )
        return target["resourceUrl"]

    # ── Phase 1 ───────────────────────────────────────────────────────

    async def _request_target(
        self, source_uri: str, filename: str, mime_type: str, lease: CredentialLease
    ) -> Dict[str, Any]:
        variables = {
            "input": [
                {
                    "resource": STAGED_UPLOAD_RESOURCE,
                    "filename": filename,
                    "mimeType": mime_type,
                    "fileSize": str(self._size_estimate),
                    "httpMethod": STAGED_UPLOAD_HTTP_METHOD,
                }
            ]
        }
        spec = RequestSpec.graphql(
            STAGED_UPLOADS_CREATE_MUTATION, variables, timeout=self._request_timeout
        )

        try:
            resp = await self._executor.execute(spec, lease.storefront_id, lease)
        except VendorHubException as exc:
            raise StagingRequestFailed(source_uri, f"staged upload request failed: {exc}") from exc

        if not resp.is_success:
            raise StagingRequestFailed(
                source_uri, f"staged upload request failed: {resp.status_code} - {resp.text}"
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise StagingRequestFailed(source_uri, "staged upload response was not JSON") from exc

        if body.get("errors"):
            raise StagingRequestFailed(source_uri, f"staged upload errors: {body['errors']}")

        result = (body.get("data") or {}).get("stagedUploadsCreate") or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            messages = "; ".join(str(e.get("message")) for e in user_errors)
            raise StagingRequestFailed(source_uri, f"staged upload user errors: {messages}")

        targets: List[Dict[str, Any]] = result.get("stagedTargets") or []
        if not targets or not targets[0].get("url") or not targets[0].get("resourceUrl"):
            raise StagingRequestFailed(source_uri, "staged upload returned no target")
        return targets[0]

    # ── Phase 2 ───────────────────────────────────────────────────────

    async def _fetch_source(self, source_uri: str) -> bytes:
        """GET the source, following redirects only to hosts the server may fetch."""
        url = source_uri
        try:
            async with self._client.http(self._transfer_timeout) as http:
                resp = await http.get(url)
                hops = 0
                while resp.is_redirect:
                    hops += 1
                    if hops > MAX_SOURCE_REDIRECTS:
                        raise TransferFailed(
                            source_uri, f"could not fetch source image: more than {MAX_SOURCE_REDIRECTS} redirects"
                        )
                    url = str(resp.url.join(resp.headers["location"]))
                    reason = unfetchable_reason(url)
                    if reason is not None:
                        raise TransferFailed(
                            source_uri, f"could not fetch source image: redirect blocked, {reason}"
                        )
                    logger.info("source redirect source=%s location=%s", source_uri, url)
                    resp = await http.get(url)
        except httpx.HTTPError as exc:
            raise TransferFailed(source_uri, f"could not fetch source image: {exc!r}") from exc

        if not resp.is_success:
            raise TransferFailed(
                source_uri, f"could not fetch source image: HTTP {resp.status_code}"
            )
        return resp.content

    async def _transfer(
        self,
        source_uri: str,
        target: Dict[str, Any],
        filename: str,
        mime_type: str,
        content: bytes,
    ) -> None:
        # dicts keep insertion order, so the form fields go out in the
        # order Shopify listed them, followed by the file part
        form = {p["name"]: p["value"] for p in target.get("parameters") or []}
        files = {STAGED_UPLOAD_FILE_FIELD: (filename, content, mime_type)}

        try:
            async with self._client.http(self._transfer_timeout) as http:
                resp = await http.post(target["url"], data=form, files=files)
        except httpx.HTTPError as exc:
            raise TransferFailed(source_uri, f"staged upload transfer error: {exc!r}") from exc

        if not resp.is_success:
            raise TransferFailed(
                source_uri, f"staged upload transfer failed: {resp.status_code} - {resp.text}"
            )
