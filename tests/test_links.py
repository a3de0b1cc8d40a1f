import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from fakes import FakeProvider, Route
from mailproof.browser import LaunchOptions
from mailproof.config import AnalyzerConfig
from mailproof.links import analyze_links, check_link
from mailproof.models import AnalyzedLink
from mailproof.paths import allocate_run_dir
from mailproof.progress import ProgressReporter


@pytest.fixture
def config(tmp_path):
    return AnalyzerConfig(output_root=tmp_path, link_delay=(0.0, 0.0))


async def _context(provider):
    browser = await provider.launch(LaunchOptions())
    return await browser.new_context()


class TestCheckLink:
    @pytest.mark.asyncio
    async def test_redirect_chain_and_utm_merge(self, tmp_path, config):
        href = "https://a.test/?utm_campaign=x"
        provider = FakeProvider(
            {
                href: Route(
                    status=200,
                    redirects=[
                        "https://b.test/?utm_campaign=y&utm_medium=m",
                        "https://c.test/landing",
                    ],
                )
            }
        )
        context = await _context(provider)
        shot = tmp_path / "link-0.png"

        link = await check_link(context, href, "Shop", shot, config)

        assert link.status == 200
        assert link.redirect_chain == [
            "https://b.test/?utm_campaign=y&utm_medium=m",
            "https://c.test/landing",
            "https://c.test/landing",
        ]
        assert link.final_url == "https://c.test/landing"
        assert link.utm_params == {"utm_campaign": "y", "utm_medium": "m"}
        assert link.screenshot_path == str(shot)
        assert shot.exists()
        assert link.text == "Shop"

    @pytest.mark.asyncio
    async def test_final_url_wins_over_hops(self, tmp_path, config):
        href = "https://a.test/?utm_source=orig"
        provider = FakeProvider(
            {
                href: Route(
                    redirects=["https://b.test/?utm_source=hop"],
                    final_url="https://c.test/#/p?utm_source=final",
                )
            }
        )
        link = await check_link(await _context(provider), href, "", tmp_path / "l.png", config)
        assert link.utm_params == {"utm_source": "final"}

    @pytest.mark.asyncio
    async def test_no_redirect(self, tmp_path, config):
        href = "https://plain.test/"
        provider = FakeProvider({href: Route(status=200)})
        link = await check_link(await _context(provider), href, "", tmp_path / "l.png", config)
        assert link.redirect_chain == [href]
        assert link.final_url is None
        assert link.utm_params is None

    @pytest.mark.asyncio
    async def test_http_error_status_recorded(self, tmp_path, config):
        href = "https://gone.test/"
        provider = FakeProvider({href: Route(status=404)})
        link = await check_link(await _context(provider), href, "", tmp_path / "l.png", config)
        assert link.status == 404
        assert link.screenshot_path == str(tmp_path / "l.png")

    @pytest.mark.asyncio
    async def test_navigation_error_means_no_response(self, tmp_path, config):
        href = "https://download.test/file.zip"
        provider = FakeProvider({href: Route(error=PlaywrightError("net::ERR_ABORTED"))})
        link = await check_link(await _context(provider), href, "", tmp_path / "l.png", config)
        assert link.status is None
        assert link.screenshot_path == str(tmp_path / "l.png")

    @pytest.mark.asyncio
    async def test_timeout_yields_fallback(self, tmp_path, config):
        href = "https://slow.test/?utm_source=a"
        provider = FakeProvider({href: Route(error=PlaywrightTimeoutError("Timeout 15000ms exceeded"))})
        context = await _context(provider)

        link = await check_link(context, href, "Slow", tmp_path / "l.png", config)

        assert link == AnalyzedLink(
            text="Slow",
            url=href,
            status=0,
            redirect_chain=[],
            final_url=href,
            utm_params={},
            screenshot_path="",
        )
        assert all(page.closed for page in context.pages)

    @pytest.mark.asyncio
    async def test_screenshot_failure_yields_fallback(self, tmp_path, config):
        href = "https://heavy.test/"
        provider = FakeProvider({href: Route(screenshot_error=RuntimeError("capture timed out"))})
        link = await check_link(await _context(provider), href, "", tmp_path / "l.png", config)
        assert link.status == 0
        assert link.screenshot_path == ""

    @pytest.mark.asyncio
    async def test_settle_wait_uses_config(self, tmp_path):
        config = AnalyzerConfig(output_root=tmp_path, link_settle_delay=2.5)
        href = "https://plain.test/"
        provider = FakeProvider({href: Route()})
        context = await _context(provider)
        await check_link(context, href, "", tmp_path / "l.png", config)
        assert context.pages[0].waits == [2500]
        assert context.pages[0].closed

    @pytest.mark.asyncio
    async def test_navigation_and_capture_timeouts(self, tmp_path):
        href = "https://plain.test/"
        provider = FakeProvider({href: Route()})
        context = await _context(provider)

        await check_link(context, href, "", tmp_path / "l.png", AnalyzerConfig(output_root=tmp_path))

        page = context.pages[0]
        assert page.goto_calls == [{"url": href, "wait_until": "load", "timeout": 15000}]
        assert page.screenshot_calls == [
            {"path": str(tmp_path / "l.png"), "full_page": True, "timeout": 10000}
        ]

    @pytest.mark.asyncio
    async def test_dom_ready_failure_is_ignored(self, tmp_path, config):
        href = "https://a.test/"
        provider = FakeProvider(
            {href: Route(status=200, dom_ready_error=PlaywrightTimeoutError("Timeout 30000ms"))}
        )
        shot = tmp_path / "l.png"

        link = await check_link(await _context(provider), href, "", shot, config)

        assert link.status == 200
        assert link.redirect_chain == [href]
        assert link.screenshot_path == str(shot)


class TestAnalyzeLinks:
    @pytest.mark.asyncio
    async def test_skips_and_order(self, tmp_path, config):
        html = (
            '<a href="https://one.test/" title="One">1</a>'
            "<a>no href</a>"
            '<a href="mailto:x@y.test" title="Mail">m</a>'
            '<a href="data:text/plain,hi">d</a>'
            '<a href="https://two.test/">2</a>'
        )
        provider = FakeProvider({"https://two.test/": Route(status=500)})
        context = await _context(provider)
        paths = allocate_run_dir(tmp_path, 1)
        events = []

        links = await analyze_links(context, html, paths, config, ProgressReporter(events.append))

        assert [link.url for link in links] == [
            "https://one.test/",
            "mailto:x@y.test",
            "data:text/plain,hi",
            "https://two.test/",
        ]
        mail = links[1]
        assert mail == AnalyzedLink(text="Mail", url="mailto:x@y.test")
        assert links[2].text == ""
        assert links[2].status is None
        assert links[3].status == 500
        assert links[3].screenshot_path == str(paths.link(4))
        assert provider.navigated_urls() == ["https://one.test/", "https://two.test/"]
        assert [(e.stage, e.current, e.total) for e in events] == [
            ("links", 1, 2),
            ("links", 2, 2),
        ]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_affect_others(self, tmp_path, config):
        html = (
            '<a href="https://ok.test/a">a</a>'
            '<a href="https://slow.test/">b</a>'
            '<a href="https://ok.test/c">c</a>'
        )
        provider = FakeProvider(
            {"https://slow.test/": Route(error=PlaywrightTimeoutError("Timeout"))}
        )
        context = await _context(provider)
        paths = allocate_run_dir(tmp_path, 1)

        links = await analyze_links(context, html, paths, config, ProgressReporter())

        assert [link.status for link in links] == [200, 0, 200]
        assert links[2].redirect_chain == ["https://ok.test/c"]

    @pytest.mark.asyncio
    async def test_pause_between_navigations(self, tmp_path, monkeypatch):
        config = AnalyzerConfig(output_root=tmp_path, link_delay=(0.5, 1.5))
        sleeps = []

        async def fake_sleep(delay):
            sleeps.append(delay)

        monkeypatch.setattr("mailproof.links.asyncio.sleep", fake_sleep)
        html = "".join(f'<a href="https://s{i}.test/">{i}</a>' for i in range(3))
        provider = FakeProvider()
        context = await _context(provider)

        await analyze_links(context, html, allocate_run_dir(tmp_path, 1), config, ProgressReporter())

        assert len(sleeps) == 2
        assert all(0.5 <= delay <= 1.5 for delay in sleeps)
