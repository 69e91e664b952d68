"""Command-line front end for mediawiki-links.

Builds the wiki registry from settings, then either scans message text for
``[[...]]`` references or looks up a single title::

    mediawiki-links scan "see [[mgp:Foo]] and [[Bar|baz]]"
    echo "[[Foo]]" | mediawiki-links --channel 1234 scan -
    mediawiki-links lookup mgp:Foo
    mediawiki-links lookup            # list configured wikis

Configuration comes from ``MEDIAWIKI_LINKS_*`` environment variables or a
``.env`` file (see :mod:`mediawiki_links.config.settings`).

Exit codes:
    0: Lines were printed for a resolved reference or the wiki listing.
    1: Nothing resolved, or no prefix could be inferred.
    2: Bad command-line arguments (argparse).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from mediawiki_links.config.settings import Settings, get_settings
from mediawiki_links.core.logging_config import configure_logging
from mediawiki_links.wiki.formatter import Formatter
from mediawiki_links.wiki.registry import build_registry
from mediawiki_links.wiki.service import LinkService, LookupStatus
from mediawiki_links.wiki.site import build_http_client


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mediawiki-links",
        description="Resolve [[wiki links]] against configured MediaWiki sites.",
    )
    parser.add_argument(
        "--channel",
        default=None,
        help="Channel ID whose default wikis apply (see MEDIAWIKI_LINKS_CHANNEL_DEFAULT_WIKIS).",
    )
    parser.add_argument(
        "--locale",
        default=None,
        help="Message locale for output lines (en, zh). Defaults to settings.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Resolve every [[...]] reference in a message.")
    scan.add_argument("text", nargs="+", help="Message text segments; '-' reads stdin.")

    lookup = subparsers.add_parser(
        "lookup", help="Print the URL of one page, or list wikis when no title is given."
    )
    lookup.add_argument("title", nargs="*", help="prefix:Title, or Title with default wikis.")

    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the parsed command and return the process exit code."""
    async with build_http_client(settings.user_agent, settings.http_timeout_seconds) as client:
        registry = await build_registry(settings.wikis, client)
        service = LinkService(
            registry,
            client,
            settings=settings,
            formatter=Formatter(args.locale or settings.locale),
        )

        if args.command == "scan":
            segments = [sys.stdin.read() if text == "-" else text for text in args.text]
            lines = await service.handle_message(segments, channel=args.channel)
            if not lines:
                return 1
            print("\n".join(lines))
            return 0

        reply = await service.lookup(" ".join(args.title), channel=args.channel)
        print("\n".join(reply.lines))
        return 0 if reply.status in (LookupStatus.FOUND, LookupStatus.LISTING) else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Console-script entry point.

    Wraps :func:`_run` in ``asyncio.run`` and exits with its status.
    """
    args = _parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    sys.exit(asyncio.run(_run(args, settings)))


if __name__ == "__main__":
    main()
