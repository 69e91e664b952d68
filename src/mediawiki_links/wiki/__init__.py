"""Wiki link resolution for mediawiki-links.

Turns ``[[Title]]`` references found in chat messages into canonical page
titles and URLs on one of several configured MediaWiki sites.

Pieces, leaf-first:

- :mod:`~mediawiki_links.wiki.site`: one MediaWiki installation; site-info
  initialization and batched title resolution (``redirects=1``).
- :mod:`~mediawiki_links.wiki.registry`: prefix -> site mapping built once at
  startup.  A prefix is ``Unregistered``, ``Failed`` or ``Ready``.
- :mod:`~mediawiki_links.wiki.extractor`: finds ``[[...]]`` references.
- :mod:`~mediawiki_links.wiki.resolver`: prefix splitting, one concurrent
  batch per target site, first-match-wins assembly.
- :mod:`~mediawiki_links.wiki.formatter`: display strings.
- :mod:`~mediawiki_links.wiki.service`: message handling and the
  single-title lookup used by the CLI.

**No credentials required**: only public read endpoints are queried.  A
descriptive ``User-Agent`` is sent on every request.
"""
