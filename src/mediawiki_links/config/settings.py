"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.  List and
mapping fields are read from the environment as JSON, e.g.::

    MEDIAWIKI_LINKS_WIKIS='[{"prefixes": ["wp", "enwp"], "endpoint": "https://en.wikipedia.org/w/api.php"}]'
    MEDIAWIKI_LINKS_DEFAULT_WIKIS='["wp"]'

Usage::

    from mediawiki_links.config.settings import get_settings

    settings = get_settings()
    for wiki in settings.wikis:
        ...
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediawiki_links.wiki.config import DEFAULT_USER_AGENT, DEFAULT_WIKIS


class WikiConfig(BaseModel):
    """One configured wiki: the prefixes that select it and its API endpoint."""

    prefixes: list[str] = Field(min_length=1)
    """Wiki names, also used as ``prefix:Title`` selectors.  Must be unique
    across all configured wikis."""

    endpoint: str = Field(min_length=1)
    """The wiki's ``api.php`` URL, usually ``/api.php`` or ``/w/api.php``.
    Special:Version on the wiki lists it."""

    @field_validator("prefixes")
    @classmethod
    def _strip_prefixes(cls, value: list[str]) -> list[str]:
        stripped = [prefix.strip() for prefix in value]
        if not all(stripped):
            raise ValueError("wiki prefixes must not be blank")
        return stripped


class Settings(BaseSettings):
    """Configuration backed by environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIAWIKI_LINKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Wikis
    # ------------------------------------------------------------------

    wikis: list[WikiConfig] = Field(
        default_factory=lambda: [WikiConfig(**entry) for entry in DEFAULT_WIKIS],
        min_length=1,
    )
    """Wikis that references may resolve against, in configuration order."""

    default_wikis: list[str] = []
    """Prefixes of the wikis tried, in order, for references without a prefix."""

    channel_default_wikis: dict[str, list[str]] = {}
    """Per-channel overrides of ``default_wikis``, keyed by channel ID."""

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    locale: str = "en"
    """Message catalogue used for output lines (``"en"`` or ``"zh"``)."""

    # ------------------------------------------------------------------
    # HTTP client
    # ------------------------------------------------------------------

    http_timeout_seconds: float = Field(default=30.0, gt=0)
    """Timeout applied to every MediaWiki API request."""

    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    """User-Agent sent to every wiki.  Wikimedia policy requires a descriptive one."""

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings singleton.

    In tests, call ``get_settings.cache_clear()`` after patching environment
    variables.
    """
    return Settings()
