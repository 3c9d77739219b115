"""Shared helpers."""

from src.common.url import cache_key_for_url, normalize_feed_url, resolve_endpoint


__all__ = [
    "cache_key_for_url",
    "normalize_feed_url",
    "resolve_endpoint",
]
