"""High-level orchestration for rendering an email and checking its links and images."""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Union

from playwright.async_api import Browser, BrowserContext

from .browser import (
    BrowserProvider,
    LaunchOptions,
    PlaywrightBrowserProvider,
    close_quietly,
    new_stealth_context,
)
from .config import AnalyzerConfig
from .content import extract_image_candidates
from .errors import AnalysisFatalError
from .images import filter_tracking_pixels, validate_images
from .links import analyze_links, check_link
from .models import AnalysisResult, AnalyzedImage, AnalyzedLink
from .paths import ScreenshotPaths, allocate_run_dir
from .progress import (
    STAGE_COMPLETE,
    STAGE_PARSING,
    STAGE_SCREENSHOTS,
    ProgressCallback,
    ProgressReporter,
)
from .renderer import RenderedEmail, render_email
from .utils import is_data_uri, is_navigable

logger = logging.getLogger("mailproof")

RunId = Union[str, int]

STATE_INIT = "init"
STATE_RENDERING = "rendering"
STATE_LINK_ANALYSIS = "link-analysis"
STATE_IMAGE_ANALYSIS = "image-analysis"
STATE_COMPLETE = "complete"


class EmailAnalyzer:
    """Run the full analysis of one email body per call.

    Runs are independent: the analyzer keeps no state between them apart
    from its provider and configuration.
    """

    def __init__(self, provider: BrowserProvider, config: Optional[AnalyzerConfig] = None) -> None:
        self.provider = provider
        self.config = config or AnalyzerConfig()

    def _advance(self, run_id: RunId, previous: str, state: str) -> str:
        logger.debug("Run %s: %s -> %s", run_id, previous, state)
        return state

    def _allocate(self, run_id: RunId) -> ScreenshotPaths:
        try:
            return allocate_run_dir(self.config.output_root, run_id)
        except OSError as exc:
            raise AnalysisFatalError(
                f"Could not create screenshot directory for run {run_id}: {exc}", run_id
            ) from exc

    async def _launch(self, run_id: RunId, headless: Optional[bool] = None) -> Browser:
        options = LaunchOptions.from_config(self.config, headless=headless)
        try:
            return await self.provider.launch(options)
        except Exception as exc:
            raise AnalysisFatalError(f"Failed to launch browser for run {run_id}: {exc}", run_id) from exc

    async def analyze(
        self,
        run_id: RunId,
        html: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """Render ``html``, check its links and images, and return the report.

        Raises AnalysisFatalError when a browser cannot be obtained or the
        content cannot be loaded; individual link and image failures are
        recorded in the result instead.
        """
        reporter = ProgressReporter(on_progress)
        start = time.perf_counter()
        state = STATE_INIT
        paths = self._allocate(run_id)

        state = self._advance(run_id, state, STATE_RENDERING)
        reporter.emit(STAGE_PARSING, "Loading email content...")
        browser = await self._launch(run_id)
        rendered: Optional[RenderedEmail] = None
        try:
            try:
                rendered = await render_email(browser, html, paths, self.config)
                email_dom = await rendered.html()
            except Exception as exc:
                raise AnalysisFatalError(
                    f"Failed to load email content for run {run_id}: {exc}", run_id
                ) from exc
            reporter.emit(STAGE_SCREENSHOTS, "Screenshots captured")

            state = self._advance(run_id, state, STATE_LINK_ANALYSIS)
            links = await analyze_links(rendered.context, email_dom, paths, self.config, reporter)

            state = self._advance(run_id, state, STATE_IMAGE_ANALYSIS)
            candidates = filter_tracking_pixels(
                extract_image_candidates(email_dom), self.config.pixel_rules
            )
            await close_quietly(rendered.context, "render context")
            rendered = None
            images = await self._validate_images(run_id, candidates, reporter)
        finally:
            if rendered is not None:
                await close_quietly(rendered.context, "render context")
            await close_quietly(browser, "browser")

        state = self._advance(run_id, state, STATE_COMPLETE)
        reporter.emit(STAGE_COMPLETE, "Analysis complete!")
        logger.info(
            "Analyzed run %s in %.2fs (%d links, %d images)",
            run_id,
            time.perf_counter() - start,
            len(links),
            len(images),
        )
        return AnalysisResult(
            links=links,
            images=images,
            screenshot_desktop_path=str(paths.desktop),
            screenshot_mobile_path=str(paths.mobile),
        )

    async def _validate_images(self, run_id, candidates, reporter) -> List[AnalyzedImage]:
        # image checks never share cookies or state with link navigation
        image_browser: Optional[Browser] = None
        if any(not is_data_uri(candidate.src) for candidate in candidates):
            image_browser = await self._launch(run_id, headless=True)
        try:
            return await validate_images(image_browser, candidates, self.config, reporter)
        finally:
            await close_quietly(image_browser, "image browser")

    async def analyze_link(
        self,
        run_id: RunId,
        url: str,
        index: int = 0,
        text: Optional[str] = None,
    ) -> AnalyzedLink:
        """Re-check a single link outside of a full email analysis."""
        if not is_navigable(url):
            return AnalyzedLink.skipped(url, text)

        paths = self._allocate(run_id)
        browser = await self._launch(run_id)
        context: Optional[BrowserContext] = None
        try:
            try:
                context = await new_stealth_context(browser)
            except Exception as exc:
                raise AnalysisFatalError(
                    f"Failed to open browser context for run {run_id}: {exc}", run_id
                ) from exc
            return await check_link(context, url, text, paths.link(index), self.config)
        finally:
            await close_quietly(context, "link context")
            await close_quietly(browser, "browser")


async def analyze(
    run_id: RunId,
    html: str,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[AnalyzerConfig] = None,
    provider: Optional[BrowserProvider] = None,
) -> AnalysisResult:
    """Analyze one email body, launching Playwright unless a provider is given."""
    if provider is not None:
        return await EmailAnalyzer(provider, config).analyze(run_id, html, on_progress)
    async with PlaywrightBrowserProvider() as owned:
        return await EmailAnalyzer(owned, config).analyze(run_id, html, on_progress)


async def analyze_link(
    run_id: RunId,
    url: str,
    index: int = 0,
    text: Optional[str] = None,
    config: Optional[AnalyzerConfig] = None,
    provider: Optional[BrowserProvider] = None,
) -> AnalyzedLink:
    """Check a single link, launching Playwright unless a provider is given."""
    if provider is not None:
        return await EmailAnalyzer(provider, config).analyze_link(run_id, url, index, text)
    async with PlaywrightBrowserProvider() as owned:
        return await EmailAnalyzer(owned, config).analyze_link(run_id, url, index, text)
