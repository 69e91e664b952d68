"""Configuration package for mediawiki-links.

Re-exports the settings symbols so that callers can write::

    from mediawiki_links.config import Settings, WikiConfig, get_settings
"""

from __future__ import annotations

from mediawiki_links.config.settings import Settings, WikiConfig, get_settings

__all__ = [
    "Settings",
    "WikiConfig",
    "get_settings",
]
