"""Link and image extraction from the rendered email markup."""

from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup

from .models import ImageCandidate, LinkCandidate

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_dimension(value: Optional[str]) -> Optional[int]:
    """Parse an HTML width/height attribute the way browsers' parseInt does.

    ``"300px"`` becomes 300; missing or non-numeric values become None.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    if not match:
        return None
    return int(match.group(1))


def _attr(tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if isinstance(value, list):
        # class-like multi-valued attributes come back as lists
        return " ".join(value)
    return value


def extract_link_candidates(html: str) -> List[LinkCandidate]:
    """Return every anchor's href and title in document order."""
    soup = BeautifulSoup(html, "html.parser")
    return [
        LinkCandidate(index=index, href=_attr(anchor, "href"), title=_attr(anchor, "title"))
        for index, anchor in enumerate(soup.find_all("a"))
    ]


def extract_image_candidates(html: str) -> List[ImageCandidate]:
    """Return every ``<img>`` that has a source, in document order."""
    soup = BeautifulSoup(html, "html.parser")
    candidates: List[ImageCandidate] = []
    for img in soup.find_all("img"):
        src = _attr(img, "src")
        if not src:
            continue
        candidates.append(
            ImageCandidate(
                src=src,
                alt=_attr(img, "alt") or None,
                width=parse_dimension(_attr(img, "width")),
                height=parse_dimension(_attr(img, "height")),
            )
        )
    return candidates
