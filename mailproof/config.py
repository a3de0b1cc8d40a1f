"""Configuration objects and constants for the email analyzer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_OUTPUT_ROOT = Path("screenshots")

ANTI_DETECTION_ARGS: Tuple[str, ...] = (
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--no-sandbox",
)

STEALTH_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
STEALTH_VIEWPORT = (1040, 632)
STEALTH_LOCALE = "en-US"
STEALTH_TIMEZONE = "America/New_York"
STEALTH_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"macOS"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

# Runs before any page script in every stealth context.
STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', {
  get: () => [
    { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer' },
    { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai' },
    { name: 'Native Client', filename: 'internal-nacl-plugin' },
  ],
});
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) =>
  parameters.name === 'notifications'
    ? Promise.resolve({ state: 'denied' })
    : originalQuery(parameters);
window.chrome = { runtime: {}, loadTimes: function() {}, csi: function() {}, app: {} };
"""


@dataclass(frozen=True)
class TrackingPixelRules:
    """Static blocklists used to recognise tracking pixels by URL."""

    domains: Tuple[str, ...] = ("beacon.krxd.net",)
    paths: Tuple[str, ...] = (
        "/open.aspx",  # SFMC open tracking
        "/1x1_",
    )


DEFAULT_PIXEL_RULES = TrackingPixelRules()


@dataclass
class AnalyzerConfig:
    """Top-level settings that control rendering and link/image checks.

    Durations are expressed in seconds and converted to Playwright
    milliseconds where they are used.
    """

    output_root: Path = DEFAULT_OUTPUT_ROOT
    headless: bool = True
    executable_path: Optional[str] = None
    launch_args: Tuple[str, ...] = ANTI_DETECTION_ARGS
    content_timeout: float = 30.0
    link_timeout: float = 15.0
    link_settle_delay: float = 5.0
    link_screenshot_timeout: float = 10.0
    image_timeout: float = 5.0
    link_delay: Tuple[float, float] = (0.5, 1.5)
    desktop_viewport: Tuple[int, int] = (800, 600)
    mobile_viewport: Tuple[int, int] = (375, 667)
    pixel_rules: TrackingPixelRules = field(default_factory=TrackingPixelRules)
