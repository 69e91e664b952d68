"""Shared pytest fixtures for mediawiki-links tests.

Fixture summary
---------------
make_site        Factory for ``WikiSite`` values without any HTTP traffic.
make_registry    Factory for ``WikiRegistry`` values from ``(prefixes, state)`` pairs.
settings         ``Settings`` built from explicit values, ignoring the environment.
reset_logging    Restores structlog and root-logger state after a test that
                 calls ``configure_logging()``.

All tests run without a network connection.  HTTP traffic is mocked with
``respx``, or by patching ``WikiSite.resolve_titles`` where only the
coordination logic is under test.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence

import pytest
import structlog

from mediawiki_links.config.settings import Settings, WikiConfig, get_settings
from mediawiki_links.wiki.registry import Failed, Ready, RegistryEntry, WikiRegistry
from mediawiki_links.wiki.site import WikiSite


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Make every test read settings afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_site() -> Callable[..., WikiSite]:
    """Return a factory for ``WikiSite`` values on ``<slug>.example.org``."""

    def _make(
        slug: str = "a",
        site_name: str | None = None,
        article_path: str = "/wiki/$1",
    ) -> WikiSite:
        return WikiSite(
            endpoint=f"https://{slug}.example.org/w/api.php",
            site_name=site_name or f"Wiki {slug.upper()}",
            base_url=f"https://{slug}.example.org/wiki/Main_Page",
            article_path=article_path,
        )

    return _make


@pytest.fixture
def make_registry() -> Callable[..., WikiRegistry]:
    """Return a factory building a registry from ``(prefixes, site_or_state)`` pairs.

    A ``WikiSite`` becomes ``Ready(site)``; ``None`` becomes a ``Failed``
    entry; a ``Failed``/``Ready`` instance is used as is.
    """

    def _make(*pairs: tuple[Sequence[str], WikiSite | Failed | Ready | None]) -> WikiRegistry:
        entries = []
        for index, (prefixes, value) in enumerate(pairs):
            if isinstance(value, WikiSite):
                state: Failed | Ready = Ready(site=value)
                endpoint = value.endpoint
            elif value is None:
                endpoint = f"https://broken{index}.example.org/w/api.php"
                state = Failed(endpoint=endpoint, reason="HTTP 503")
            else:
                state = value
                endpoint = value.site.endpoint if isinstance(value, Ready) else value.endpoint
            entries.append(RegistryEntry(prefixes=tuple(prefixes), endpoint=endpoint, state=state))
        return WikiRegistry(entries)

    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings with two example wikis and no default wikis."""
    return Settings(
        _env_file=None,
        wikis=[
            WikiConfig(prefixes=["a", "wa"], endpoint="https://a.example.org/w/api.php"),
            WikiConfig(prefixes=["b"], endpoint="https://b.example.org/w/api.php"),
        ],
        default_wikis=[],
        channel_default_wikis={},
        locale="en",
    )


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Undo ``configure_logging()`` side effects after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
