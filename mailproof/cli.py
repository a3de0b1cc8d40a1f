"""Command-line entry point for the email analyzer."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

from .analyzer import analyze, analyze_link
from .campaigns import summarize_campaigns
from .config import DEFAULT_OUTPUT_ROOT, AnalyzerConfig
from .errors import AnalysisFatalError
from .models import ProgressEvent
from .source import load_email_html

logger = logging.getLogger("mailproof.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("analyze", *argv)


def _add_browser_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--run-id",
        default="cli",
        help="Identifier used to name the screenshot directory",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_ROOT,
        type=Path,
        help="Directory under which per-run screenshot folders are created",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window while links are visited",
    )
    parser.add_argument(
        "--executable-path",
        default=None,
        help="Chromium executable to launch instead of Playwright's bundled build",
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Skip the randomized pause between link navigations",
    )
    parser.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Also write the JSON report to this file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Render an email in Chromium and report link status, redirects, "
            "UTM parameters, image availability, and screenshots."
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze an .eml message or HTML file"
    )
    analyze_parser.add_argument("path", type=Path, help="Email (.eml) or HTML file to analyze")
    _add_browser_arguments(analyze_parser)

    link_parser = subparsers.add_parser("link", help="Re-check a single link")
    link_parser.add_argument("url", help="URL to visit")
    link_parser.add_argument(
        "--index",
        type=int,
        default=0,
        help="Index used to name the link screenshot",
    )
    _add_browser_arguments(link_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AnalyzerConfig:
    config = AnalyzerConfig(
        output_root=Path(args.output).resolve(),
        headless=not args.headed,
        executable_path=args.executable_path,
    )
    if args.no_delay:
        config.link_delay = (0.0, 0.0)
    return config


def _log_progress(event: ProgressEvent) -> None:
    if event.current is not None and event.total is not None:
        logger.info("[%s %d/%d] %s", event.stage, event.current, event.total, event.message)
    else:
        logger.info("[%s] %s", event.stage, event.message)


def _emit(report: Dict[str, Any], json_out: Path | None) -> None:
    text = json.dumps(report, indent=2)
    if json_out is not None:
        json_out.write_text(text + "\n", encoding="utf-8")
        logger.info("Saved report to %s", json_out)
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def _run_analyze(args: argparse.Namespace) -> int:
    try:
        source = load_email_html(args.path)
    except (OSError, ValueError) as exc:
        logger.error("Could not read %s: %s", args.path, exc)
        return 2

    config = build_config(args)
    try:
        result = asyncio.run(analyze(args.run_id, source.html, _log_progress, config))
    except AnalysisFatalError as exc:
        logger.error("Analysis failed: %s", exc)
        return 1

    report = result.to_dict()
    report["subject"] = source.subject
    report["campaigns"] = summarize_campaigns(result.links).to_dict()
    _emit(report, args.json_out)
    return 0


def _run_link(args: argparse.Namespace) -> int:
    config = build_config(args)
    try:
        link = asyncio.run(analyze_link(args.run_id, args.url, args.index, config=config))
    except AnalysisFatalError as exc:
        logger.error("Link check failed: %s", exc)
        return 1
    _emit(link.to_dict(), args.json_out)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    if args.command == "analyze":
        return _run_analyze(args)
    return _run_link(args)


if __name__ == "__main__":
    sys.exit(main())
