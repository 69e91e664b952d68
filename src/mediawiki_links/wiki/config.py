"""Constants for the MediaWiki API client.

Used by :class:`~mediawiki_links.wiki.site.WikiSite` and by the settings
defaults in :mod:`mediawiki_links.config.settings`.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Default configuration
# ---------------------------------------------------------------------------

DEFAULT_WIKIS: list[dict[str, object]] = [
    {
        "prefixes": ["萌百", "mgp"],
        "endpoint": "https://zh.moegirl.org.cn/api.php",
    },
]
"""Wikis configured when ``MEDIAWIKI_LINKS_WIKIS`` is not set."""

# ---------------------------------------------------------------------------
# MediaWiki Action API parameters
# ---------------------------------------------------------------------------

BASE_QUERY_PARAMS: dict[str, str] = {
    "format": "json",
    "formatversion": "2",
    "action": "query",
}
"""Parameters shared by every request.  ``formatversion=2`` makes ``pages``
a list and boolean flags such as ``missing`` real JSON booleans."""

SITEINFO_PARAMS: dict[str, str] = {
    **BASE_QUERY_PARAMS,
    "meta": "siteinfo",
    "siprop": "general",
}

RESOLVE_PARAMS: dict[str, str] = {
    **BASE_QUERY_PARAMS,
    "redirects": "1",
}

MAX_TITLES_PER_QUERY: int = 50
"""MediaWiki's multi-title limit for clients without the ``apihighlimits`` right."""

ARTICLE_PATH_PLACEHOLDER: str = "$1"

# Characters ``encodeURI`` leaves alone in addition to the unreserved set.
# MediaWiki article paths keep them literal.
URL_PATH_SAFE_CHARS: str = ";,/?:@&=+$!*'()#"

# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

DEFAULT_USER_AGENT: str = (
    "mediawiki-links/0.1 (chat link resolver; +https://www.mediawiki.org/wiki/API:Etiquette) "
    "python-httpx"
)
"""User-Agent sent on every request.  MediaWiki API etiquette asks for a
descriptive agent; anonymous ones may be throttled."""
