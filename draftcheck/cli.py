"""
draftcheck: command-line preview of the two-tier feedback.

Usage:
    draftcheck preview "You're an idiot and everyone like you is wrong."
    draftcheck preview --file draft.txt --sensitivity HIGH
    draftcheck preview --no-ai --json < draft.txt
    draftcheck sensitivity             # show the persisted level
    draftcheck sensitivity LOW         # change it
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import httpx

from draftcheck.analyzers.factory import get_client
from draftcheck.config import settings
from draftcheck.coordinator import HybridFeedbackCoordinator
from draftcheck.logging import setup_logging
from draftcheck.models import MergedView
from draftcheck.preferences import (
    MemoryPreferenceStore,
    SqlitePreferenceStore,
    parse_sensitivity,
)
from draftcheck.schemas.feedback import SensitivityLevel, Tier

LEVELS = [level.value for level in SensitivityLevel]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="draftcheck",
        description="Live argument-quality feedback for a draft response",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default="text",
        help="Log output format (default: text)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    preview = sub.add_parser("preview", help="Analyze a draft with both tiers")
    preview.add_argument("text", nargs="?", help="Draft text (default: stdin)")
    preview.add_argument("--file", help="Read the draft from a file")
    preview.add_argument(
        "--sensitivity",
        type=str.upper,
        choices=LEVELS,
        help="Override the persisted sensitivity for this run",
    )
    preview.add_argument("--discussion-id", default=None)
    preview.add_argument("--topic-id", default=None)
    preview.add_argument("--no-ai", action="store_true", help="Fast tier only")
    preview.add_argument("--json", action="store_true", help="Print the view as JSON")

    sens = sub.add_parser("sensitivity", help="Show or set the persisted sensitivity")
    sens.add_argument("level", nargs="?", type=str.upper, choices=LEVELS)
    return parser


def _read_text(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.text is not None:
        return args.text
    return sys.stdin.read()


async def run_preview(
    text: str,
    level: SensitivityLevel,
    *,
    discussion_id: Optional[str] = None,
    topic_id: Optional[str] = None,
    enable_ai: bool = True,
    http_client: Optional[httpx.AsyncClient] = None,
) -> MergedView:
    """Send one draft through both tiers and return the settled view."""
    owns_http = http_client is None
    if http_client is None:
        http_client = (
            httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
            if settings.HTTP_TIMEOUT is not None else httpx.AsyncClient()
        )
    coordinator = HybridFeedbackCoordinator(
        get_client(Tier.FAST, http_client),
        get_client(Tier.SLOW, http_client),
        MemoryPreferenceStore(level.value),
        discussion_id=discussion_id,
        topic_id=topic_id,
        enable_ai=enable_ai,
        fast_debounce=0,
        slow_debounce=0,
    )
    try:
        coordinator.set_content(text)
        await coordinator.wait_idle()
        return coordinator.view
    finally:
        await coordinator.aclose()
        if owns_http:
            await http_client.aclose()


def format_view(view: MergedView) -> str:
    lines = [
        "[AI analysis]" if view.is_ai_feedback else "[Quick check]",
        f"Ready to post: {'yes' if view.ready_to_post else 'no'}",
    ]
    if view.summary:
        lines.append(f"Summary: {view.summary}")
    for item in view.feedback:
        label = item.type.value + (f"/{item.subtype}" if item.subtype else "")
        lines.append(f"  - {label} ({item.confidence_score:.2f}): {item.suggestion_text}")
    if view.error:
        lines.append(f"Note: {view.error}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(fmt=args.log_format)

    store = SqlitePreferenceStore(settings.PREFERENCES_DB)

    if args.command == "sensitivity":
        if args.level:
            store.save(SensitivityLevel(args.level))
        level = store.load()
        print(f"{level.value} (confidence threshold {level.threshold})")
        return 0

    text = _read_text(args)
    if len(text) < settings.MIN_CONTENT_LENGTH:
        print(f"Content must be at least {settings.MIN_CONTENT_LENGTH} characters.",
              file=sys.stderr)
        return 1

    level = parse_sensitivity(args.sensitivity) or store.load()
    view = asyncio.run(run_preview(
        text,
        level,
        discussion_id=args.discussion_id,
        topic_id=args.topic_id,
        enable_ai=settings.ENABLE_AI and not args.no_ai,
    ))
    if args.json:
        print(json.dumps(view.to_dict(), indent=2))
    else:
        print(format_view(view))
    return 0


if __name__ == "__main__":
    sys.exit(main())
