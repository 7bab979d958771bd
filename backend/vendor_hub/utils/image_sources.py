"""
Image source rules — which image URIs can be fetched server-side and which
already live on the platform.

Pure functions; no network access.
"""

import ipaddress
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

from vendor_hub.core.constants.publishing import (
    BLOCKED_SOURCE_SCHEMES,
    FETCHABLE_SOURCE_SCHEMES,
    LOCAL_HOSTNAMES,
    LOCAL_HOST_SUFFIXES,
)


def _hostname(uri: str) -> Tuple[str, Optional[str]]:
    parsed = urlsplit(uri.strip())
    return (parsed.scheme or "").lower(), parsed.hostname


def is_platform_hosted(uri: str, resource_domains: Iterable[str]) -> bool:
    """True when the URI points at one of the platform's own resource domains."""
    if not uri:
        return False
    try:
        scheme, host = _hostname(uri)
    except ValueError:
        return False
    if scheme not in FETCHABLE_SOURCE_SCHEMES or not host:
        return False
    for domain in resource_domains:
        domain = domain.lower().strip(".")
        if host == domain or host.endswith(f".{domain}"):
            return True
    return False


def unfetchable_reason(uri: str) -> Optional[str]:
    """Why the server cannot fetch this URI, or None when it can."""
    if not uri or not uri.strip():
        return "empty image URL"
    try:
        scheme, host = _hostname(uri)
    except ValueError:
        return f"malformed image URL: {uri}"

    if not scheme:
        return f"malformed image URL: {uri}"
    if scheme in BLOCKED_SOURCE_SCHEMES:
        return f"{scheme}: URL is local to the submitting browser"
    if scheme not in FETCHABLE_SOURCE_SCHEMES:
        return f"unsupported URL scheme '{scheme}'"
    if not host:
        return f"image URL has no host: {uri}"
    if host in LOCAL_HOSTNAMES or host.endswith(LOCAL_HOST_SUFFIXES):
        return f"local host '{host}' is not reachable from the server"

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return None
    if address.is_loopback or address.is_link_local or address.is_unspecified:
        return f"loopback or link-local address '{host}' is not reachable from the server"
    return None


def split_persistable(
    images: Iterable[str], resource_domains: Iterable[str]
) -> Tuple[List[str], List[str]]:
    """Partition a stored image list into (kept, removed), preserving order.

    Platform-hosted URIs are always kept; anything else is kept only when
    the server could fetch it.
    """
    domains = list(resource_domains)
    kept: List[str] = []
    removed: List[str] = []
    for uri in images:
        if isinstance(uri, str) and (
            is_platform_hosted(uri, domains) or unfetchable_reason(uri) is None
        ):
            kept.append(uri)
        else:
            removed.append(uri)
    return kept, removed
