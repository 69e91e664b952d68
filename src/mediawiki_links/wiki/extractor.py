"""Extraction of ``[[Title]]`` references from message text."""

from __future__ import annotations

import re
from collections.abc import Iterable

# ``[[``, a title made of anything but control characters and ``<>[]|{}``
# plus DEL, an optional ``|display text`` that is discarded, then ``]]``.
WIKI_LINK_PATTERN: re.Pattern[str] = re.compile(
    r"\[\[\s*([^\x00-\x1f<>\[\]|{}\x7f]+)\s*(?:\|.*?)?\]\]"
)


def extract_titles(segments: str | Iterable[str]) -> list[str]:
    """Return the unique titles referenced as ``[[Title]]`` in *segments*.

    Args:
        segments: The text segments of a message, or a single string.

    Returns:
        Stripped titles without duplicates, in order of first occurrence.
        ``[[Foo|bar]]`` yields ``"Foo"``; empty or unterminated references
        yield nothing.
    """
    if isinstance(segments, str):
        segments = (segments,)

    titles: dict[str, None] = {}
    for segment in segments:
        for match in WIKI_LINK_PATTERN.finditer(segment):
            title = match.group(1).strip()
            if title:
                titles[title] = None
    return list(titles)
