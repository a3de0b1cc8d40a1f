"""MCP server exposing the email analysis tools."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .analyzer import analyze, analyze_link
from .campaigns import summarize_campaigns
from .config import AnalyzerConfig
from .source import load_email_html

logger = logging.getLogger("mailproof.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="mailproof")


def _config_for(output_dir: str | None, tmp_dir: str) -> AnalyzerConfig:
    root = Path(output_dir).expanduser() if output_dir else Path(tmp_dir)
    return AnalyzerConfig(output_root=root)


def _without_screenshots(report: dict) -> None:
    report.pop("screenshotDesktopPath", None)
    report.pop("screenshotMobilePath", None)
    for link in report.get("links", []):
        link.pop("screenshotPath", None)


@mcp.tool()
async def analyze_email(path: str, output_dir: str | None = None) -> str:
    """Analyze an .eml or HTML file and return the JSON report.

    Without ``output_dir`` the screenshots are discarded and their paths are
    left out of the report.
    """
    source_path = Path(path).expanduser()
    if not source_path.exists():
        raise FileNotFoundError(f"Email path does not exist: {source_path}")
    source = load_email_html(source_path)

    with tempfile.TemporaryDirectory(prefix="mailproof-") as tmp_dir:
        config = _config_for(output_dir, tmp_dir)
        result = await analyze(source_path.stem, source.html, config=config)
    report = result.to_dict()
    if not output_dir:
        _without_screenshots(report)
    report["subject"] = source.subject
    report["campaigns"] = summarize_campaigns(result.links).to_dict()
    return json.dumps(report, indent=2)


@mcp.tool()
async def check_link(url: str, output_dir: str | None = None) -> str:
    """Visit a single URL and report status, redirects and UTM parameters.

    The screenshot path is only reported when ``output_dir`` is given.
    """
    with tempfile.TemporaryDirectory(prefix="mailproof-link-") as tmp_dir:
        config = _config_for(output_dir, tmp_dir)
        link = await analyze_link("mcp", url, config=config)
    report = link.to_dict()
    if not output_dir:
        report.pop("screenshotPath", None)
    return json.dumps(report, indent=2)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
