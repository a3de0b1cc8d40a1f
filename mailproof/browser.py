"""Browser acquisition and stealth context setup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from .config import (
    ANTI_DETECTION_ARGS,
    STEALTH_HEADERS,
    STEALTH_INIT_SCRIPT,
    STEALTH_LOCALE,
    STEALTH_TIMEZONE,
    STEALTH_USER_AGENT,
    STEALTH_VIEWPORT,
    AnalyzerConfig,
)

logger = logging.getLogger("mailproof")


@dataclass(frozen=True)
class LaunchOptions:
    """Options handed to a provider when a browser is requested."""

    headless: bool = True
    executable_path: Optional[str] = None
    args: Tuple[str, ...] = ANTI_DETECTION_ARGS

    @classmethod
    def from_config(cls, config: AnalyzerConfig, headless: Optional[bool] = None) -> "LaunchOptions":
        return cls(
            headless=config.headless if headless is None else headless,
            executable_path=config.executable_path,
            args=tuple(config.launch_args),
        )


class BrowserProvider(Protocol):
    """Anything able to hand out a running browser."""

    async def launch(self, options: LaunchOptions) -> Browser:
        ...

    async def close(self) -> None:
        ...


class PlaywrightBrowserProvider:
    """Launch Chromium through Playwright, starting the driver on first use."""

    def __init__(self) -> None:
        self._playwright: Optional[Playwright] = None

    async def __aenter__(self) -> "PlaywrightBrowserProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def launch(self, options: LaunchOptions) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
            logger.debug("Playwright started")
        logger.debug(
            "Launching Chromium (headless=%s, executable=%s)",
            options.headless,
            options.executable_path or "bundled",
        )
        return await self._playwright.chromium.launch(
            headless=options.headless,
            executable_path=options.executable_path,
            args=list(options.args),
        )

    async def close(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            logger.debug("Playwright stopped")


async def new_stealth_context(browser: Browser) -> BrowserContext:
    """Open a context that presents as an ordinary desktop Chrome user."""
    width, height = STEALTH_VIEWPORT
    context = await browser.new_context(
        user_agent=STEALTH_USER_AGENT,
        viewport={"width": width, "height": height},
        screen={"width": width, "height": height},
        locale=STEALTH_LOCALE,
        timezone_id=STEALTH_TIMEZONE,
        extra_http_headers=dict(STEALTH_HEADERS),
        bypass_csp=True,
        ignore_https_errors=True,
    )
    await context.add_init_script(script=STEALTH_INIT_SCRIPT)
    return context


async def close_quietly(resource: Any, label: str) -> None:
    """Close a page, context or browser without letting close errors escape."""
    if resource is None:
        return
    try:
        await resource.close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing %s: %s", label, exc)
