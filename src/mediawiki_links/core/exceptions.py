"""Exception hierarchy for mediawiki-links.

All custom exceptions subclass ``MediaWikiLinksError`` so that callers can
catch the whole family with a single ``except`` clause.

Hierarchy::

    MediaWikiLinksError
    └── WikiSiteError            (endpoint: str)
        ├── WikiRequestError
        │   └── WikiRateLimitError   (retry_after: float)
        └── WikiResponseError
"""

from __future__ import annotations


class MediaWikiLinksError(Exception):
    """Base class for all mediawiki-links exceptions."""


# ---------------------------------------------------------------------------
# Wiki site exceptions
# ---------------------------------------------------------------------------


class WikiSiteError(MediaWikiLinksError):
    """Raised when a call against a MediaWiki API endpoint fails.

    Args:
        message: Human-readable description of the failure.
        endpoint: The ``api.php`` URL that was being queried.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class WikiRequestError(WikiSiteError):
    """Raised on transport failures and non-2xx HTTP responses.

    Args:
        message: Human-readable description of the failure.
        endpoint: The ``api.php`` URL that was being queried.
        status_code: HTTP status code, or ``None`` when no response arrived.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, endpoint=endpoint)
        self.status_code = status_code


class WikiRateLimitError(WikiRequestError):
    """Raised when a wiki answers HTTP 429.

    Args:
        message: Human-readable description of the rate limit.
        endpoint: The ``api.php`` URL that was being queried.
        retry_after: Seconds the server asked us to wait. Defaults to 60.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        retry_after: float = 60.0,
    ) -> None:
        super().__init__(message, endpoint=endpoint, status_code=429)
        self.retry_after = retry_after


class WikiResponseError(WikiSiteError):
    """Raised when a wiki returns a body that is not the expected JSON shape."""
