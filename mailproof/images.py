"""Image filtering and validation utilities."""

from __future__ import annotations

import logging
from typing import List, Optional

from playwright.async_api import Browser, Page

from .browser import close_quietly
from .config import AnalyzerConfig, TrackingPixelRules
from .models import AnalyzedImage, ImageCandidate
from .pixels import is_tracking_pixel
from .progress import STAGE_IMAGES, ProgressReporter
from .utils import is_data_uri

logger = logging.getLogger("mailproof")

INLINE_IMAGE_STATUS = 200
FAILED_IMAGE_STATUS = 0


def filter_tracking_pixels(
    candidates: List[ImageCandidate],
    rules: TrackingPixelRules,
) -> List[ImageCandidate]:
    """Drop images classified as tracking pixels."""
    kept: List[ImageCandidate] = []
    for candidate in candidates:
        if is_tracking_pixel(candidate.width, candidate.height, candidate.src, rules):
            logger.debug("Skipping tracking pixel %s", candidate.src)
            continue
        kept.append(candidate)
    return kept


async def check_image(browser: Browser, src: str, config: AnalyzerConfig) -> int:
    """Load an image URL in its own page and return the HTTP status (0 on failure)."""
    page: Optional[Page] = None
    try:
        page = await browser.new_page()
        response = await page.goto(src, timeout=config.image_timeout * 1000)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Failed to validate image %s: %s", src, exc)
        return FAILED_IMAGE_STATUS
    finally:
        await close_quietly(page, f"page for {src}")

    if response is None:
        return FAILED_IMAGE_STATUS
    return response.status


async def validate_images(
    browser: Optional[Browser],
    candidates: List[ImageCandidate],
    config: AnalyzerConfig,
    reporter: ProgressReporter,
) -> List[AnalyzedImage]:
    """Validate each image sequentially; inline ``data:`` images are assumed loaded.

    ``browser`` may be None only when every candidate is a ``data:`` image.
    """
    total = len(candidates)
    analyzed: List[AnalyzedImage] = []
    for index, candidate in enumerate(candidates, start=1):
        reporter.emit(STAGE_IMAGES, f"Checking image {index} of {total}", index, total)
        if is_data_uri(candidate.src):
            status = INLINE_IMAGE_STATUS
        else:
            status = await check_image(browser, candidate.src, config)
        analyzed.append(AnalyzedImage.from_candidate(candidate, status))
    return analyzed
