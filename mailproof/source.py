"""Loading the HTML body to analyze from ``.eml`` or plain HTML files."""

from __future__ import annotations

import html as html_lib
import logging
from dataclasses import dataclass
from email import policy
from email.parser import BytesParser
from pathlib import Path
from typing import Optional

logger = logging.getLogger("mailproof")

EMAIL_SUFFIXES = {".eml"}


@dataclass
class EmailSource:
    """HTML body plus whatever header metadata the source carried."""

    html: str
    subject: Optional[str] = None


def text_to_html(text: str) -> str:
    return f"<html><body><pre>{html_lib.escape(text)}</pre></body></html>"


def parse_email_bytes(data: bytes) -> EmailSource:
    """Extract the HTML body (or plain text as HTML) and subject from a MIME message."""
    message = BytesParser(policy=policy.default).parsebytes(data)
    subject = message.get("Subject")
    if subject is not None:
        subject = str(subject)

    part = message.get_body(preferencelist=("html",))
    if part is not None:
        return EmailSource(html=part.get_content(), subject=subject)

    part = message.get_body(preferencelist=("plain",))
    if part is not None:
        logger.info("No HTML part found, rendering the plain-text body")
        return EmailSource(html=text_to_html(part.get_content()), subject=subject)

    raise ValueError("No HTML content found in email")


def load_email_html(path: Path) -> EmailSource:
    """Read an ``.eml`` message or a raw HTML file."""
    path = Path(path).expanduser()
    if path.suffix.lower() in EMAIL_SUFFIXES:
        return parse_email_bytes(path.read_bytes())

    html = path.read_text(encoding="utf-8", errors="replace")
    if not html.strip():
        raise ValueError(f"No HTML content found in {path}")
    return EmailSource(html=html)
