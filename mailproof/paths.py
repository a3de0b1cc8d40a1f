"""Per-run screenshot directory allocation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .utils import slugify

logger = logging.getLogger("mailproof")

MAX_COLLISION_SUFFIX = 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ScreenshotPaths:
    """Absolute file locations for one run's captures."""

    root: Path

    @property
    def desktop(self) -> Path:
        return self.root / "desktop.png"

    @property
    def mobile(self) -> Path:
        return self.root / "mobile.png"

    def link(self, index: int) -> Path:
        return self.root / f"link-{index}.png"


def allocate_run_dir(output_root: Path, run_id: Union[str, int]) -> ScreenshotPaths:
    """Create a brand-new directory for a run and return its capture paths.

    The directory is named ``email-<run id>-<epoch ms>``; should that name
    already exist a numeric suffix is appended until a free name is found.
    """
    base = Path(output_root).expanduser().resolve()
    base.mkdir(parents=True, exist_ok=True)
    stem = f"email-{slugify(str(run_id))}-{_now_ms()}"

    for suffix in range(MAX_COLLISION_SUFFIX + 1):
        candidate = base / (f"{stem}-{suffix}" if suffix else stem)
        try:
            candidate.mkdir()
        except FileExistsError:
            continue
        logger.debug("Allocated screenshot directory %s", candidate)
        return ScreenshotPaths(root=candidate)
    raise FileExistsError(f"Could not allocate a fresh directory under {base} for {stem}")
