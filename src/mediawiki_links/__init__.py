"""mediawiki-links: resolve ``[[wiki links]]`` in chat messages.

See :mod:`mediawiki_links.wiki` for the resolution engine and
:mod:`mediawiki_links.cli` for the command-line front end.
"""

__version__ = "0.1.0"
