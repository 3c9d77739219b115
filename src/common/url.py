"""URL helpers shared by the session and fetch layers."""

import hashlib
from urllib.parse import urljoin, urlparse

from src.config.constants import CACHE_KEY_PREFIX, PSEUDO_SCHEME_MAP


def normalize_feed_url(url: str) -> str:
    """Rewrite feed://, feeds://, webcal:// and webcals:// to http(s)://.

    Only a leading pseudo-scheme is rewritten; the rest of the URL is left
    untouched.

    Args:
        url: Feed URL as configured.

    Returns:
        URL with an http or https scheme.
    """
    for pseudo, real in PSEUDO_SCHEME_MAP.items():
        if url.startswith(pseudo):
            return real + url[len(pseudo) :]
    return url


def resolve_endpoint(uri: str, site: str) -> str:
    """Resolve a login/logout URI against the feed's origin.

    Absolute URIs are returned unchanged. Relative ones are joined to the
    scheme and host of ``site``.

    Args:
        uri: Endpoint from the fetch configuration.
        site: Normalized feed URL.

    Returns:
        Absolute endpoint URL.
    """
    if urlparse(uri).scheme:
        return uri
    parsed = urlparse(site)
    if not parsed.scheme or not parsed.netloc:
        return uri
    return urljoin(f"{parsed.scheme}://{parsed.netloc}", uri)


def cache_key_for_url(url: str) -> str:
    """Derive the header cache key for a feed URL.

    Args:
        url: Feed URL as configured.

    Returns:
        ``feeds_http_download_`` followed by the MD5 hex digest of the URL.
    """
    digest = hashlib.md5(url.encode("utf-8"), usedforsecurity=False).hexdigest()
    return CACHE_KEY_PREFIX + digest
