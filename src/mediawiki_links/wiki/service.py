"""Host-facing entry points: message handling and single-title lookup.

A chat host wires :meth:`LinkService.handle_message` in as message
middleware (``None`` means "not ours, pass the message on") and exposes
:meth:`LinkService.lookup` as its ``wiki [title]`` command.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

import httpx
import structlog

from mediawiki_links.config.settings import Settings, get_settings
from mediawiki_links.core.logging_config import resolution_id_var
from mediawiki_links.wiki.extractor import extract_titles
from mediawiki_links.wiki.formatter import Formatter
from mediawiki_links.wiki.registry import WikiRegistry
from mediawiki_links.wiki.resolver import ResolutionCoordinator

logger = structlog.get_logger(__name__)


class LookupStatus(str, Enum):
    """Outcome of a single-title lookup."""

    LISTING = "listing"
    FOUND = "found"
    NOT_FOUND = "not_found"
    REQUIRE_PREFIX = "require_prefix"


@dataclass(frozen=True)
class LookupReply:
    """Lines to send back for a lookup, and what they mean."""

    status: LookupStatus
    lines: list[str] = field(default_factory=list)


class LinkService:
    """Resolves wiki references for a chat host.

    Args:
        registry: Registry built at startup by
            :func:`~mediawiki_links.wiki.registry.build_registry`.
        client: HTTP client shared by all lookups.
        settings: Settings providing the default wikis and locale.
            Defaults to :func:`~mediawiki_links.config.settings.get_settings`.
        formatter: Output formatter.  Defaults to one for ``settings.locale``.
    """

    def __init__(
        self,
        registry: WikiRegistry,
        client: httpx.AsyncClient,
        settings: Settings | None = None,
        formatter: Formatter | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._coordinator = ResolutionCoordinator(registry, client)
        self._formatter = formatter or Formatter(self._settings.locale)

    @property
    def registry(self) -> WikiRegistry:
        return self._coordinator.registry

    def default_wikis_for(self, channel: str | None = None) -> list[str]:
        """Default-wiki prefixes for *channel*, falling back to the global list."""
        if channel is not None and channel in self._settings.channel_default_wikis:
            return list(self._settings.channel_default_wikis[channel])
        return list(self._settings.default_wikis)

    async def handle_message(
        self,
        segments: str | Iterable[str],
        channel: str | None = None,
    ) -> list[str] | None:
        """Answer a chat message that may contain ``[[...]]`` references.

        Args:
            segments: Text segments of the message, or a single string.
            channel: Channel the message was posted in; selects the
                default wikis.

        Returns:
            One line per resolved reference, or ``None`` when the message
            has no references, none of them can be attributed to a wiki, or
            none resolved.
        """
        titles = extract_titles(segments)
        if not titles:
            return None

        token = resolution_id_var.set(uuid.uuid4().hex)
        try:
            logger.debug("titles", titles=titles, channel=channel)
            results = await self._coordinator.resolve(
                titles, lambda: self.default_wikis_for(channel)
            )
        finally:
            resolution_id_var.reset(token)

        if not results:
            return None
        return self._formatter.format_lines(results)

    async def lookup(self, title: str | None, channel: str | None = None) -> LookupReply:
        """Resolve a single title typed as a command argument.

        An empty title lists the configured wikis and the default wikis
        instead.

        Args:
            title: ``prefix:Title`` or, when default wikis apply, ``Title``.
            channel: Channel the command was issued in.

        Returns:
            The :class:`LookupReply`.  For a found page its only line is the
            page URL.
        """
        title = (title or "").strip()
        if not title:
            return LookupReply(
                status=LookupStatus.LISTING,
                lines=self._formatter.wiki_listing(
                    self.registry.entries, self.default_wikis_for(channel)
                ),
            )

        results = await self._coordinator.resolve(
            [title], lambda: self.default_wikis_for(channel)
        )
        if results is None:
            return LookupReply(
                status=LookupStatus.REQUIRE_PREFIX,
                lines=[self._formatter.require_prefix()],
            )
        if title in results:
            return LookupReply(status=LookupStatus.FOUND, lines=[results[title].url])
        return LookupReply(
            status=LookupStatus.NOT_FOUND,
            lines=[self._formatter.not_found(title)],
        )
