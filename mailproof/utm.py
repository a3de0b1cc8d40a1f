"""Campaign-tracking (UTM) parameter parsing and merging."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlsplit

logger = logging.getLogger("mailproof")

UTM_PREFIX = "utm_"


def _utm_pairs(query: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key.startswith(UTM_PREFIX):
            params[key] = value
    return params


def extract_utm(url: str) -> Dict[str, str]:
    """Return the ``utm_*`` parameters carried by ``url``.

    Hash-routed URLs such as ``https://example.com/#/path?utm_source=x``
    carry a second query string inside the fragment; its parameters are
    applied after the regular query string and win on collision.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        logger.debug("Could not parse UTM parameters from %s", url)
        return {}

    params = _utm_pairs(parts.query)
    if "?" in parts.fragment:
        params.update(_utm_pairs(parts.fragment.split("?", 1)[1]))
    return params


def merge_utm(*layers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Fold parameter mappings in order; later layers override earlier ones."""
    merged: Dict[str, str] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged
