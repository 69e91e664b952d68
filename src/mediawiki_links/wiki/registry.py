"""Prefix registry: which configured wiki a ``prefix:`` selects.

The registry is built once, before any message is handled, by
:func:`build_registry`.  It initializes every configured endpoint
concurrently and returns an immutable :class:`WikiRegistry` in which every
configured prefix is in one of two states:

- :class:`Ready`: the wiki initialized; lookups go to ``state.site``.
- :class:`Failed`: initialization failed; the prefix stays broken for the
  lifetime of the registry and is skipped silently.

Prefixes that were never configured look up as :data:`UNREGISTERED`.  The
distinction matters to callers: a broken wiki is an operational problem
already logged at startup, while an unknown prefix in the default-wiki list
is a configuration error logged on every use.

Example::

    async with httpx.AsyncClient() as client:
        registry = await build_registry(settings.wikis, client)
        state = registry.lookup("mgp")
        if isinstance(state, Ready):
            site = state.site
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from types import MappingProxyType

import httpx
import structlog

from mediawiki_links.config.settings import WikiConfig
from mediawiki_links.wiki.site import WikiSite

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Prefix states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Unregistered:
    """The prefix is not configured for any wiki."""


UNREGISTERED = Unregistered()


@dataclass(frozen=True)
class Failed:
    """The prefix is configured but its wiki could not be initialized."""

    endpoint: str
    reason: str


@dataclass(frozen=True)
class Ready:
    """The prefix is configured and its wiki is live."""

    site: WikiSite


PrefixState = Unregistered | Failed | Ready


@dataclass(frozen=True)
class RegistryEntry:
    """One configured wiki together with the outcome of its initialization."""

    prefixes: tuple[str, ...]
    endpoint: str
    state: Failed | Ready


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class WikiRegistry:
    """Immutable mapping from prefix to :data:`PrefixState`.

    When several entries declare the same prefix, the entry that comes last
    in configuration order owns it; the clash is reported in
    :attr:`duplicate_prefixes`.

    Args:
        entries: Configured wikis in configuration order.
    """

    def __init__(self, entries: Iterable[RegistryEntry]) -> None:
        self._entries = tuple(entries)
        prefixes: dict[str, Failed | Ready] = {}
        duplicates: set[str] = set()
        for entry in self._entries:
            for prefix in entry.prefixes:
                if prefix in prefixes:
                    duplicates.add(prefix)
                prefixes[prefix] = entry.state
        self._prefixes = MappingProxyType(prefixes)
        self._duplicates = frozenset(duplicates)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._prefixes

    def __len__(self) -> int:
        return len(self._prefixes)

    def __repr__(self) -> str:
        return f"WikiRegistry(prefixes={sorted(self._prefixes)!r})"

    @property
    def entries(self) -> tuple[RegistryEntry, ...]:
        """Configured wikis, in configuration order."""
        return self._entries

    @property
    def duplicate_prefixes(self) -> frozenset[str]:
        """Prefixes declared by more than one configured wiki."""
        return self._duplicates

    def lookup(self, prefix: str) -> PrefixState:
        """Return the state of *prefix*, :data:`UNREGISTERED` when unknown."""
        return self._prefixes.get(prefix, UNREGISTERED)

    def expand_defaults(self, prefixes: Iterable[str] | None) -> tuple[WikiSite, ...]:
        """Turn a default-wiki prefix list into the live sites it names.

        Unknown prefixes are logged as configuration errors and skipped.
        Prefixes of failed wikis are skipped silently.  A site named twice
        (for instance through two of its prefixes) appears once, at its
        first position.

        Args:
            prefixes: Default-wiki prefixes in priority order, or ``None``.

        Returns:
            Live sites in priority order.
        """
        sites: list[WikiSite] = []
        for prefix in prefixes or ():
            state = self.lookup(prefix)
            if isinstance(state, Ready):
                if state.site not in sites:
                    sites.append(state.site)
            elif isinstance(state, Unregistered):
                logger.error("wiki not defined", prefix=prefix)
        return tuple(sites)


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


async def build_registry(
    wikis: Sequence[WikiConfig],
    client: httpx.AsyncClient,
) -> WikiRegistry:
    """Initialize every configured wiki and return the finished registry.

    All endpoints are queried concurrently.  A wiki that fails to
    initialize is logged and recorded as :class:`Failed`; it never prevents
    the other wikis or the caller from proceeding.

    Args:
        wikis: Configured wikis in configuration order.
        client: HTTP client used for the site-info requests.

    Returns:
        The immutable :class:`WikiRegistry`.
    """
    claimed: set[str] = set()
    for wiki in wikis:
        for prefix in wiki.prefixes:
            if prefix in claimed:
                logger.error("duplicate wiki prefix", prefix=prefix, endpoint=wiki.endpoint)
            claimed.add(prefix)

    results = await asyncio.gather(
        *(WikiSite.from_endpoint(client, wiki.endpoint) for wiki in wikis),
        return_exceptions=True,
    )

    entries: list[RegistryEntry] = []
    for wiki, result in zip(wikis, results):
        state: Failed | Ready
        if isinstance(result, Exception):
            logger.error("error init wiki", endpoint=wiki.endpoint, exc_info=result)
            state = Failed(endpoint=wiki.endpoint, reason=str(result))
        elif isinstance(result, BaseException):
            raise result
        else:
            state = Ready(site=result)
        entries.append(
            RegistryEntry(prefixes=tuple(wiki.prefixes), endpoint=wiki.endpoint, state=state)
        )

    registry = WikiRegistry(entries)
    logger.info(
        "wiki registry built",
        ready=sum(isinstance(entry.state, Ready) for entry in entries),
        failed=sum(isinstance(entry.state, Failed) for entry in entries),
    )
    return registry
