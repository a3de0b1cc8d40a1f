"""Utility helpers for string normalization and URL schemes."""

from __future__ import annotations

import re
from typing import Optional

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
NON_NAVIGABLE_SCHEMES = ("data:", "mailto:")


def slugify(value: str, fallback: str = "run") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def is_data_uri(url: str) -> bool:
    return url.lower().startswith("data:")


def is_navigable(href: Optional[str]) -> bool:
    """Links with ``data:``/``mailto:`` schemes are reported but never visited."""
    if not href:
        return False
    return not href.lower().startswith(NON_NAVIGABLE_SCHEMES)
