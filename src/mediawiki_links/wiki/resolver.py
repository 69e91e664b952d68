"""Resolution of ``[[...]]`` references across many wikis in one pass.

:class:`ResolutionCoordinator` takes the raw titles found in a message and:

1. Splits each title into an optional wiki prefix and a bare title.  The
   longest colon-separated leading prefix known to the registry wins, so
   with both ``a`` and ``a:b`` configured, ``a:b:Title`` goes to ``a:b``.
   Titles without a known prefix fall back to the default wikis.
2. Groups bare titles by target site and issues one
   :meth:`~mediawiki_links.wiki.site.WikiSite.resolve_titles` call per
   site, all concurrently.  A site that fails is logged and contributes
   nothing; the others are unaffected.
3. Walks the titles in the order they were given and, for each, takes the
   first target wiki that knows the page.  Later default wikis are never
   consulted once one matched.

Results are keyed by the full title as typed, so ``[[A:X]]`` and
``[[B:X]]`` are reported separately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

import httpx
import structlog

from mediawiki_links.wiki.registry import Ready, WikiRegistry
from mediawiki_links.wiki.site import ResolvedPage, WikiSite

logger = structlog.get_logger(__name__)

DefaultWikis = Sequence[str] | Callable[[], Iterable[str] | None] | None
"""Default-wiki prefixes, or a zero-argument callable producing them."""


@dataclass(frozen=True)
class ResolutionQuery:
    """How one raw title will be looked up.

    Attributes:
        raw_title: The title exactly as extracted from the message.
        bare_title: ``raw_title`` without the matched prefix segments.
        prefix: The registered prefix that matched, or ``None``.
        wikis: Target sites in priority order.  Empty when the matched
            prefix belongs to a wiki that failed to initialize, or when no
            prefix matched and there are no live default wikis.
    """

    raw_title: str
    bare_title: str
    prefix: str | None
    wikis: tuple[WikiSite, ...]


@dataclass(frozen=True)
class ResolvedLink:
    """A resolved page together with the wiki it was found on."""

    wiki: WikiSite
    title: str
    url: str
    redirects_to: str | None = None

    @classmethod
    def from_page(cls, wiki: WikiSite, page: ResolvedPage) -> ResolvedLink:
        return cls(wiki=wiki, title=page.title, url=page.url, redirects_to=page.redirects_to)


class ResolutionCoordinator:
    """Resolves raw titles against the wikis of a :class:`WikiRegistry`.

    The coordinator holds no per-call state, so concurrent :meth:`resolve`
    calls for different messages are independent.

    Args:
        registry: The registry built at startup.
        client: HTTP client shared by all resolution calls.
    """

    def __init__(self, registry: WikiRegistry, client: httpx.AsyncClient) -> None:
        self._registry = registry
        self._client = client

    @property
    def registry(self) -> WikiRegistry:
        return self._registry

    def split_prefix(self, title: str) -> tuple[str | None, str]:
        """Split *title* into its longest registered prefix and the rest.

        Segments are stripped before being joined into a candidate prefix,
        so ``"mgp : Foo"`` matches the ``mgp`` prefix.

        Returns:
            ``(prefix, bare_title)``, or ``(None, title)`` when no leading
            segments form a registered prefix.
        """
        parts = title.split(":")
        for i in range(len(parts) - 1, 0, -1):
            prefix = ":".join(part.strip() for part in parts[:i])
            if prefix in self._registry:
                return prefix, ":".join(parts[i:])
        return None, title

    def build_queries(
        self,
        titles: Iterable[str],
        default_wikis: DefaultWikis = None,
    ) -> list[ResolutionQuery]:
        """Plan the lookup of each title, in input order.

        The default-wiki list is expanded at most once, and only if some
        title has no registered prefix.
        """
        queries: list[ResolutionQuery] = []
        defaults: tuple[WikiSite, ...] | None = None

        for title in titles:
            prefix, bare_title = self.split_prefix(title)
            wikis: tuple[WikiSite, ...]
            if prefix is not None:
                state = self._registry.lookup(prefix)
                wikis = (state.site,) if isinstance(state, Ready) else ()
            else:
                if defaults is None:
                    defaults = self._registry.expand_defaults(_default_prefixes(default_wikis))
                wikis = defaults
            queries.append(
                ResolutionQuery(
                    raw_title=title,
                    bare_title=bare_title,
                    prefix=prefix,
                    wikis=wikis,
                )
            )
        return queries

    async def resolve(
        self,
        titles: Iterable[str],
        default_wikis: DefaultWikis = None,
    ) -> dict[str, ResolvedLink] | None:
        """Resolve *titles* and return what was found.

        Args:
            titles: Raw titles as extracted from a message.
            default_wikis: Prefixes of the wikis to try, in order, for
                titles without a registered prefix.

        Returns:
            Mapping from raw title to :class:`ResolvedLink`, in input order,
            omitting titles that no target wiki knows.  ``None`` when no
            title matched a prefix and there were no live default wikis,
            i.e. the user has to supply a prefix.
        """
        queries = self.build_queries(titles, default_wikis)
        if not any(query.prefix is not None or query.wikis for query in queries):
            return None

        tasks: dict[WikiSite, dict[str, None]] = {}
        for query in queries:
            for wiki in query.wikis:
                tasks.setdefault(wiki, {})[query.bare_title] = None
        logger.debug(
            "resolution tasks",
            tasks={wiki.site_name: list(bare_titles) for wiki, bare_titles in tasks.items()},
        )

        site_results = await self._resolve_sites(
            {wiki: list(bare_titles) for wiki, bare_titles in tasks.items()}
        )

        results: dict[str, ResolvedLink] = {}
        for query in queries:
            for wiki in query.wikis:
                page = site_results.get(wiki, {}).get(query.bare_title)
                if page is None:
                    continue
                results[query.raw_title] = ResolvedLink.from_page(wiki, page)
                break

        logger.debug("resolution results", found=len(results), requested=len(queries))
        return results

    async def _resolve_sites(
        self,
        tasks: dict[WikiSite, list[str]],
    ) -> dict[WikiSite, dict[str, ResolvedPage]]:
        """Run one batch per site concurrently; failed sites are left out."""
        outcomes = await asyncio.gather(
            *(site.resolve_titles(self._client, titles) for site, titles in tasks.items()),
            return_exceptions=True,
        )

        site_results: dict[WikiSite, dict[str, ResolvedPage]] = {}
        for (site, titles), outcome in zip(tasks.items(), outcomes):
            if isinstance(outcome, Exception):
                logger.error(
                    "error resolving titles",
                    site=site.site_name,
                    endpoint=site.endpoint,
                    titles=titles,
                    exc_info=outcome,
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            site_results[site] = outcome
        return site_results


def _default_prefixes(default_wikis: DefaultWikis) -> Iterable[str] | None:
    """Evaluate *default_wikis* into a prefix iterable."""
    if callable(default_wikis):
        default_wikis = default_wikis()
    if isinstance(default_wikis, str):
        return (default_wikis,)
    return default_wikis
