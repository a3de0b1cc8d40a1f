"""Sequential hyperlink checking: status, redirects, UTM parameters, captures."""

from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import Dict, List, Optional

from playwright.async_api import (
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Request,
    Response,
    TimeoutError as PlaywrightTimeoutError,
)

from .browser import close_quietly
from .config import AnalyzerConfig
from .content import extract_link_candidates
from .models import AnalyzedLink
from .paths import ScreenshotPaths
from .progress import STAGE_LINKS, ProgressReporter
from .utils import is_navigable
from .utm import extract_utm, merge_utm

logger = logging.getLogger("mailproof")


async def _human_pause(config: AnalyzerConfig) -> None:
    low, high = config.link_delay
    delay = random.uniform(low, high)
    if delay > 0:
        await asyncio.sleep(delay)


async def _navigate(page: Page, url: str, config: AnalyzerConfig) -> Optional[Response]:
    """Open ``url``; navigation errors other than a timeout mean "no response"."""
    try:
        return await page.goto(url, wait_until="load", timeout=config.link_timeout * 1000)
    except PlaywrightTimeoutError:
        raise
    except PlaywrightError as exc:
        logger.info("No response for %s: %s", url, exc)
        return None


async def check_link(
    context: BrowserContext,
    href: str,
    text: Optional[str],
    screenshot_path: Path,
    config: AnalyzerConfig,
) -> AnalyzedLink:
    """Visit one link in a fresh page of ``context`` and describe where it led.

    Never raises: any failure (including a navigation timeout) produces the
    unreachable fallback record for this link.
    """
    page: Optional[Page] = None
    hops: List[str] = []
    hop_params: Dict[str, str] = {}

    def on_request(request: Request) -> None:
        if request.is_navigation_request() and request.redirected_from is not None:
            hops.append(request.url)
            hop_params.update(extract_utm(request.url))

    try:
        page = await context.new_page()
        page.on("request", on_request)

        logger.info("Checking %s", href)
        response = await _navigate(page, href, config)

        # client-side redirects and late scripts
        await page.wait_for_timeout(config.link_settle_delay * 1000)
        try:
            await page.wait_for_load_state("domcontentloaded")
        except PlaywrightError as exc:
            logger.debug("DOM-ready wait failed for %s: %s", href, exc)

        final_url = page.url
        redirect_chain = hops + [final_url]
        utm_params = merge_utm(extract_utm(href), hop_params, extract_utm(final_url))

        await page.screenshot(
            path=str(screenshot_path),
            full_page=True,
            timeout=config.link_screenshot_timeout * 1000,
        )
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Failed to analyze link %s: %s", href, exc)
        return AnalyzedLink.unreachable(href, text)
    finally:
        await close_quietly(page, f"page for {href}")

    return AnalyzedLink(
        text=text,
        url=href,
        status=response.status if response is not None else None,
        redirect_chain=redirect_chain,
        final_url=final_url if final_url != href else None,
        utm_params=utm_params or None,
        screenshot_path=str(screenshot_path),
    )


async def analyze_links(
    context: BrowserContext,
    email_dom: str,
    paths: ScreenshotPaths,
    config: AnalyzerConfig,
    reporter: ProgressReporter,
) -> List[AnalyzedLink]:
    """Check every anchor of the rendered email DOM, one at a time, in document order."""
    candidates = extract_link_candidates(email_dom)
    total = sum(1 for candidate in candidates if is_navigable(candidate.href))
    logger.info("Found %d anchors (%d navigable)", len(candidates), total)

    results: List[AnalyzedLink] = []
    checked = 0
    for candidate in candidates:
        href = candidate.href
        if not href:
            continue
        text = candidate.title or ""

        if not is_navigable(href):
            results.append(AnalyzedLink.skipped(href, text))
            continue

        checked += 1
        reporter.emit(STAGE_LINKS, f"Checking link {checked} of {total}", checked, total)
        if checked > 1:
            await _human_pause(config)

        results.append(
            await check_link(context, href, text, paths.link(candidate.index), config)
        )
    return results
