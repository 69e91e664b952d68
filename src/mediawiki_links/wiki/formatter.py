"""Display strings for resolved links and lookup outcomes.

Messages live in :data:`MESSAGES`, keyed by locale and then by message key.
Unknown locales fall back to English, and so do keys a locale does not
define.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from mediawiki_links.wiki.registry import Ready, RegistryEntry
from mediawiki_links.wiki.resolver import ResolvedLink

DEFAULT_LOCALE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "result": "{site_name} | {title}: {url}",
        "result-redirected": "{site_name} | {title} (→ {redirects_to}): {url}",
        "require-prefix": "There is no default wiki here. Please add a wiki prefix.",
        "not-found": "No page named {title} was found.",
        "not-connected": "[not connected, unavailable]",
        "wiki-line": "{prefixes}: {site_name}",
        "default-wikis": "Default wikis: {wikis}",
        "none": "(none)",
    },
    "zh": {
        "require-prefix": "当前无默认 wiki，请指定 wiki 前缀。",
        "not-found": "未找到名为 {title} 的条目。",
        "not-connected": "[未连接，无法使用！]",
        "default-wikis": "当前默认 wiki：{wikis}",
        "none": "(无)",
    },
}


class Formatter:
    """Renders output lines in one locale.

    Args:
        locale: Key into :data:`MESSAGES`, e.g. ``"en"`` or ``"zh"``.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale if locale in MESSAGES else DEFAULT_LOCALE

    def text(self, key: str, **params: object) -> str:
        """Render message *key* with *params*."""
        template = MESSAGES[self.locale].get(key) or MESSAGES[DEFAULT_LOCALE][key]
        return template.format(**params)

    def format_link(self, link: ResolvedLink) -> str:
        key = "result-redirected" if link.redirects_to else "result"
        return self.text(
            key,
            site_name=link.wiki.site_name,
            title=link.title,
            redirects_to=link.redirects_to,
            url=link.url,
        )

    def format_lines(self, results: Mapping[str, ResolvedLink]) -> list[str]:
        """One line per resolved link, in result order."""
        return [self.format_link(link) for link in results.values()]

    def not_found(self, title: str) -> str:
        return self.text("not-found", title=title)

    def require_prefix(self) -> str:
        return self.text("require-prefix")

    def wiki_listing(
        self,
        entries: Iterable[RegistryEntry],
        default_prefixes: Sequence[str] | None,
    ) -> list[str]:
        """List configured wikis with their prefixes, then the default wikis.

        Wikis that failed to initialize are shown with the ``not-connected``
        marker instead of their site name.
        """
        lines = []
        for entry in entries:
            if isinstance(entry.state, Ready):
                site_name = entry.state.site.site_name
            else:
                site_name = self.text("not-connected")
            lines.append(
                self.text("wiki-line", prefixes=", ".join(entry.prefixes), site_name=site_name)
            )
        wikis = ", ".join(default_prefixes or ()) or self.text("none")
        lines.append(self.text("default-wikis", wikis=wikis))
        return lines
