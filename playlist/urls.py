"""
Playback URL construction and normalization.
"""

from typing import Iterable, Optional
from urllib.parse import quote, urlparse

from shared.constants import CONTENT_ROUTE, LEGACY_CONTENT_ROUTE

PROXY_ROUTES = (CONTENT_ROUTE, LEGACY_CONTENT_ROUTE)


def content_url(key: str, base_url: str = "") -> str:
    """URL under which the content route serves ``key``."""
    return f"{base_url.rstrip('/')}{CONTENT_ROUTE}{quote(key, safe='')}"


def is_absolute_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def normalize_url(value: Optional[str], prefixes: Iterable[str]) -> Optional[str]:
    """
    Normalize a playback URL read from a stored manifest.

    Absolute URLs and content-route paths are kept; raw store keys under one
    of ``prefixes`` become content-route paths; anything else is kept.
    """
    if not value:
        return value
    if is_absolute_url(value):
        return value
    if value.startswith(PROXY_ROUTES):
        return value
    if any(prefix and value.startswith(prefix) for prefix in prefixes):
        return content_url(value)
    return value
