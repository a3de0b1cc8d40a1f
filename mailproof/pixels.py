"""Heuristics for telling tracking pixels apart from content images."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from .config import DEFAULT_PIXEL_RULES, TrackingPixelRules


def matches_tracking_url(url: str, rules: TrackingPixelRules = DEFAULT_PIXEL_RULES) -> bool:
    """Check the URL against the tracking domain and path blocklists."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname or ""
    except ValueError:
        return False

    if any(domain in hostname for domain in rules.domains):
        return True
    path = parts.path.lower()
    return any(marker.lower() in path for marker in rules.paths)


def is_tracking_pixel(
    width: Optional[int],
    height: Optional[int],
    url: str,
    rules: TrackingPixelRules = DEFAULT_PIXEL_RULES,
) -> bool:
    """Return True when an image is invisible instrumentation."""
    # only None is absent; a 0 dimension is present, so 1x0 and 0x1 images are kept
    if width == 1 and height == 1:
        return True
    if width == 1 and height is None:
        return True
    if height == 1 and width is None:
        return True
    return matches_tracking_url(url, rules)
