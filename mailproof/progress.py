"""One-way progress notifications for long-running analyses."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .models import ProgressEvent

logger = logging.getLogger("mailproof")

STAGE_PARSING = "parsing"
STAGE_SCREENSHOTS = "screenshots"
STAGE_LINKS = "links"
STAGE_IMAGES = "images"
STAGE_COMPLETE = "complete"

STAGES = (STAGE_PARSING, STAGE_SCREENSHOTS, STAGE_LINKS, STAGE_IMAGES, STAGE_COMPLETE)

ProgressCallback = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Deliver progress events to an optional callback.

    Delivery is best-effort: an exception raised by the callback is logged
    and dropped so it never reaches the pipeline.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._callback = callback

    def emit(
        self,
        stage: str,
        message: str,
        current: Optional[int] = None,
        total: Optional[int] = None,
    ) -> None:
        if stage not in STAGES:
            raise ValueError(f"Unknown progress stage: {stage}")
        logger.debug("[%s] %s", stage, message)
        if self._callback is None:
            return
        event = ProgressEvent(stage=stage, message=message, current=current, total=total)
        try:
            self._callback(event)
        except Exception:  # pylint: disable=broad-except
            logger.warning("Progress callback failed for %s event", stage, exc_info=True)
