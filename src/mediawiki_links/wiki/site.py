"""A single MediaWiki installation.

:class:`WikiSite` is created once per configured endpoint by
:meth:`WikiSite.from_endpoint`, which reads ``sitename``, ``base`` and
``articlepath`` from ``action=query&meta=siteinfo``.  After that it only
answers :meth:`WikiSite.resolve_titles`, which looks up a batch of titles in
one ``action=query&titles=...&redirects=1`` round trip and reports, per
input title, the normalized page title, the redirect target (if any) and
the article URL.

The HTTP client is not owned by the site.  Callers pass an
:class:`httpx.AsyncClient` to each call so that tests and hosts control
timeouts, headers and transports.

Failures are raised as :class:`~mediawiki_links.core.exceptions.WikiSiteError`
subclasses; callers decide whether to log and continue.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from mediawiki_links.core.exceptions import (
    WikiRateLimitError,
    WikiRequestError,
    WikiResponseError,
)
from mediawiki_links.wiki.config import (
    ARTICLE_PATH_PLACEHOLDER,
    DEFAULT_USER_AGENT,
    MAX_TITLES_PER_QUERY,
    RESOLVE_PARAMS,
    SITEINFO_PARAMS,
    URL_PATH_SAFE_CHARS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPage:
    """One title as resolved by a wiki.

    Attributes:
        title: Normalized title of the queried page.  For a redirect this is
            the redirect page itself, not its target.
        url: Absolute URL of ``title`` on the wiki.
        redirects_to: Redirect target, with ``#fragment`` when the redirect
            points at a section.  ``None`` for ordinary pages.
    """

    title: str
    url: str
    redirects_to: str | None = None


@dataclass(frozen=True)
class WikiSite:
    """An initialized MediaWiki site.

    Attributes:
        endpoint: The ``api.php`` URL.
        site_name: ``sitename`` from site info, e.g. ``"萌娘百科"``.
        base_url: ``base`` from site info (the main page URL).  Article URLs
            are resolved relative to it.
        article_path: ``articlepath`` from site info, e.g. ``"/wiki/$1"``.
    """

    endpoint: str
    site_name: str
    base_url: str
    article_path: str

    @classmethod
    async def from_endpoint(cls, client: httpx.AsyncClient, endpoint: str) -> WikiSite:
        """Initialize a site from its ``api.php`` endpoint.

        Args:
            client: HTTP client used for the site-info request.
            endpoint: The wiki's ``api.php`` URL.

        Returns:
            The initialized :class:`WikiSite`.

        Raises:
            WikiRateLimitError: On HTTP 429.
            WikiRequestError: When the endpoint is unreachable or answers
                with a non-2xx status.
            WikiResponseError: When the site-info payload is malformed.
        """
        data = await _api_get(client, endpoint, SITEINFO_PARAMS)
        try:
            general = data["query"]["general"]
            site_name = general["sitename"]
            base_url = general["base"]
            article_path = general["articlepath"]
        except (KeyError, TypeError) as exc:
            raise WikiResponseError(
                f"malformed siteinfo response from {endpoint}: missing {exc}",
                endpoint=endpoint,
            ) from exc

        if not all(isinstance(value, str) for value in (site_name, base_url, article_path)):
            raise WikiResponseError(
                f"malformed siteinfo response from {endpoint}: non-string fields",
                endpoint=endpoint,
            )
        if ARTICLE_PATH_PLACEHOLDER not in article_path:
            raise WikiResponseError(
                f"articlepath {article_path!r} from {endpoint} has no "
                f"{ARTICLE_PATH_PLACEHOLDER} placeholder",
                endpoint=endpoint,
            )

        logger.debug("wiki: initialized '%s' from %s", site_name, endpoint)
        return cls(
            endpoint=endpoint,
            site_name=site_name,
            base_url=base_url,
            article_path=article_path,
        )

    async def resolve_titles(
        self,
        client: httpx.AsyncClient,
        titles: Sequence[str],
    ) -> dict[str, ResolvedPage]:
        """Resolve a batch of titles, following normalization and redirects.

        Titles are sent in one request when there are at most
        :data:`~mediawiki_links.wiki.config.MAX_TITLES_PER_QUERY` distinct
        ones; longer inputs are split into consecutive requests.  Either all
        requests succeed or the call raises, so partial results are never
        returned.

        Args:
            client: HTTP client used for the query requests.
            titles: Titles as the user typed them.  Duplicates are allowed.

        Returns:
            Mapping from each input title (exactly as passed in, not
            normalized) to its :class:`ResolvedPage`.  Titles of pages that
            do not exist are left out.

        Raises:
            WikiRateLimitError: On HTTP 429.
            WikiRequestError: When the endpoint is unreachable or answers
                with a non-2xx status.
            WikiResponseError: When the query payload is malformed.
        """
        unique_titles = list(dict.fromkeys(titles))
        results: dict[str, ResolvedPage] = {}

        for batch_start in range(0, len(unique_titles), MAX_TITLES_PER_QUERY):
            batch = unique_titles[batch_start : batch_start + MAX_TITLES_PER_QUERY]
            params = {**RESOLVE_PARAMS, "titles": "|".join(batch)}
            data = await _api_get(client, self.endpoint, params)
            results.update(self._pages_from_query(batch, data))

        logger.debug(
            "wiki: %s resolved %d of %d titles",
            self.site_name,
            len(results),
            len(unique_titles),
        )
        return results

    def article_url(self, title: str) -> str:
        """Return the absolute URL of *title* on this site.

        The title is percent-encoded for use in a URL path, keeping reserved
        characters such as ``:`` and ``/`` literal and writing spaces as
        ``_`` the way MediaWiki does.
        """
        encoded = urllib.parse.quote(title, safe=URL_PATH_SAFE_CHARS).replace("%20", "_")
        path = self.article_path.replace(ARTICLE_PATH_PLACEHOLDER, encoded, 1)
        return urllib.parse.urljoin(self.base_url, path)

    def _pages_from_query(
        self,
        titles: Sequence[str],
        data: dict[str, Any],
    ) -> dict[str, ResolvedPage]:
        """Build per-title results from one ``action=query`` response."""
        try:
            query = data["query"]
            normalized = _first_by_key(query.get("normalized", []), "from")
            redirects = _first_by_key(query.get("redirects", []), "from")
            pages = _first_by_key(query.get("pages", []), "title")
        except (KeyError, TypeError, AttributeError) as exc:
            raise WikiResponseError(
                f"malformed query response from {self.endpoint}: {exc!r}",
                endpoint=self.endpoint,
            ) from exc

        results: dict[str, ResolvedPage] = {}
        for raw_title in titles:
            normalization = normalized.get(raw_title)
            title = normalization["to"] if normalization else raw_title

            redirect = redirects.get(title)
            page = pages.get(title, {})
            if redirect is None and (page.get("missing") or page.get("invalid")):
                continue

            redirects_to: str | None = None
            if redirect is not None:
                redirects_to = redirect["to"]
                if redirect.get("tofragment"):
                    redirects_to += "#" + redirect["tofragment"]

            results[raw_title] = ResolvedPage(
                title=title,
                url=self.article_url(title),
                redirects_to=redirects_to,
            )
        return results


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


def build_http_client(
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 30.0,
) -> httpx.AsyncClient:
    """Return an async HTTP client suitable for MediaWiki API calls.

    Args:
        user_agent: ``User-Agent`` header sent on every request.
        timeout: Per-request timeout in seconds.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": user_agent},
        follow_redirects=True,
    )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


async def _api_get(
    client: httpx.AsyncClient,
    endpoint: str,
    params: dict[str, str],
) -> dict[str, Any]:
    """GET *endpoint* with *params* and return the decoded JSON object.

    Raises:
        WikiRateLimitError: On HTTP 429.
        WikiRequestError: On other non-2xx statuses and transport errors.
        WikiResponseError: When the body is not a JSON object or carries a
            MediaWiki ``error`` member.
    """
    try:
        response = await client.get(endpoint, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        if status_code == 429:
            raise WikiRateLimitError(
                f"rate limited by {endpoint} (HTTP 429)",
                endpoint=endpoint,
                retry_after=_retry_after(exc.response),
            ) from exc
        raise WikiRequestError(
            f"HTTP {status_code} from {endpoint}",
            endpoint=endpoint,
            status_code=status_code,
        ) from exc
    except httpx.RequestError as exc:
        raise WikiRequestError(
            f"request error calling {endpoint}: {exc}",
            endpoint=endpoint,
        ) from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise WikiResponseError(
            f"non-JSON response from {endpoint}",
            endpoint=endpoint,
        ) from exc

    if not isinstance(data, dict):
        raise WikiResponseError(
            f"unexpected {type(data).__name__} response from {endpoint}",
            endpoint=endpoint,
        )
    if "error" in data:
        error = data["error"] if isinstance(data["error"], dict) else {}
        raise WikiResponseError(
            f"API error from {endpoint}: {error.get('code', 'unknown')} "
            f"({error.get('info', 'no details')})",
            endpoint=endpoint,
        )
    return data


def _retry_after(response: httpx.Response) -> float:
    """Read ``Retry-After`` in seconds, defaulting to 60."""
    try:
        return float(response.headers.get("Retry-After", 60))
    except ValueError:
        return 60.0


def _first_by_key(items: Iterable[dict[str, Any]], key: str) -> dict[str, dict[str, Any]]:
    """Index *items* by *key*, keeping the first item for repeated keys."""
    indexed: dict[str, dict[str, Any]] = {}
    for item in items:
        indexed.setdefault(item[key], item)
    return indexed
