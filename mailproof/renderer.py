"""Render the email body and capture desktop and mobile screenshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from playwright.async_api import Browser, BrowserContext, Page

from .browser import close_quietly, new_stealth_context
from .config import AnalyzerConfig
from .paths import ScreenshotPaths

logger = logging.getLogger("mailproof")


@dataclass
class RenderedEmail:
    """Open browsing surface holding the email DOM plus its captures."""

    context: BrowserContext
    page: Page
    desktop_path: str
    mobile_path: str

    async def html(self) -> str:
        return await self.page.content()


async def render_email(
    browser: Browser,
    html: str,
    paths: ScreenshotPaths,
    config: AnalyzerConfig,
) -> RenderedEmail:
    """Load ``html`` into a stealth page and take both full-page captures.

    The returned context is left open; the caller owns closing it. If any
    step fails the context is closed before the error propagates.
    """
    context = await new_stealth_context(browser)
    try:
        page = await context.new_page()
        await page.set_content(
            html,
            wait_until="networkidle",
            timeout=config.content_timeout * 1000,
        )

        width, height = config.desktop_viewport
        await page.set_viewport_size({"width": width, "height": height})
        await page.screenshot(path=str(paths.desktop), full_page=True)
        logger.info("Saved desktop screenshot to %s", paths.desktop)

        width, height = config.mobile_viewport
        await page.set_viewport_size({"width": width, "height": height})
        await page.screenshot(path=str(paths.mobile), full_page=True)
        logger.info("Saved mobile screenshot to %s", paths.mobile)
    except Exception:
        await close_quietly(context, "render context")
        raise

    return RenderedEmail(
        context=context,
        page=page,
        desktop_path=str(paths.desktop),
        mobile_path=str(paths.mobile),
    )
