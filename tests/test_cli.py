"""End-to-end tests for the ``mediawiki-links`` command.

Settings come from ``MEDIAWIKI_LINKS_*`` environment variables and all wiki
traffic is mocked with respx, site-info requests included.
"""

from __future__ import annotations

import io
import json
import sys
from collections.abc import Iterator
from unittest.mock import patch

import httpx
import pytest
import respx
import structlog

from mediawiki_links.cli import main

ENDPOINT_A = "https://a.example.org/w/api.php"
ENDPOINT_B = "https://b.example.org/w/api.php"


def _wiki(site_name: str, host: str, existing: set[str]):
    """Return a respx side effect serving site info and page queries."""

    def _handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if params.get("meta") == "siteinfo":
            return httpx.Response(
                200,
                json={
                    "batchcomplete": True,
                    "query": {
                        "general": {
                            "sitename": site_name,
                            "base": f"https://{host}/wiki/Main_Page",
                            "articlepath": "/wiki/$1",
                        }
                    },
                },
            )
        pages = [
            {"title": title} if title in existing else {"title": title, "missing": True}
            for title in params["titles"].split("|")
        ]
        return httpx.Response(200, json={"batchcomplete": True, "query": {"pages": pages}})

    return _handler


@pytest.fixture(autouse=True)
def _environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(
        "MEDIAWIKI_LINKS_WIKIS",
        json.dumps(
            [
                {"prefixes": ["a"], "endpoint": ENDPOINT_A},
                {"prefixes": ["b"], "endpoint": ENDPOINT_B},
            ]
        ),
    )
    monkeypatch.setenv("MEDIAWIKI_LINKS_DEFAULT_WIKIS", "[]")
    monkeypatch.setenv("MEDIAWIKI_LINKS_CHANNEL_DEFAULT_WIKIS", '{"1234": ["b"]}')
    monkeypatch.delenv("MEDIAWIKI_LINKS_LOCALE", raising=False)
    # Keep log lines off stdout, which carries the command output.
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(sys.stderr))
    with patch("mediawiki_links.cli.configure_logging"):
        yield
    structlog.reset_defaults()


@pytest.fixture
def wikis() -> Iterator[respx.MockRouter]:
    with respx.mock(assert_all_called=False) as mock:
        mock.get(ENDPOINT_A, name="a").mock(
            side_effect=_wiki("Wiki A", "a.example.org", {"Foo"})
        )
        mock.get(ENDPOINT_B, name="b").mock(
            side_effect=_wiki("Wiki B", "b.example.org", {"Bar"})
        )
        yield mock


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestScan:
    def test_prints_one_line_per_resolved_reference(self, wikis, capsys) -> None:
        code = _run(["scan", "see [[a:Foo]] and [[b:Bar|bar]]"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == [
            "Wiki A | Foo: https://a.example.org/wiki/Foo",
            "Wiki B | Bar: https://b.example.org/wiki/Bar",
        ]

    def test_nothing_resolved_exits_one(self, wikis, capsys) -> None:
        code = _run(["scan", "[[a:Missing]] [[Unprefixed]]"])

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_reads_stdin(self, wikis, capsys, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("[[Bar]]"))

        code = _run(["--channel", "1234", "scan", "-"])

        assert code == 0
        assert capsys.readouterr().out.strip() == "Wiki B | Bar: https://b.example.org/wiki/Bar"


class TestLookup:
    def test_found_prints_url(self, wikis, capsys) -> None:
        code = _run(["lookup", "a:Foo"])

        assert code == 0
        assert capsys.readouterr().out.strip() == "https://a.example.org/wiki/Foo"

    def test_not_found_exits_one(self, wikis, capsys) -> None:
        code = _run(["lookup", "a:Missing"])

        assert code == 1
        assert capsys.readouterr().out.strip() == "No page named a:Missing was found."

    def test_require_prefix_in_chinese(self, wikis, capsys) -> None:
        code = _run(["--locale", "zh", "lookup", "Foo"])

        assert code == 1
        assert capsys.readouterr().out.strip() == "当前无默认 wiki，请指定 wiki 前缀。"

    def test_words_are_joined_into_one_title(self, wikis, capsys) -> None:
        wikis["a"].mock(side_effect=_wiki("Wiki A", "a.example.org", {"Foo bar"}))

        code = _run(["lookup", "a:Foo", "bar"])

        assert code == 0
        assert capsys.readouterr().out.strip() == "https://a.example.org/wiki/Foo_bar"

    def test_listing_marks_unreachable_wiki(self, wikis, capsys) -> None:
        wikis["b"].mock(return_value=httpx.Response(503))

        code = _run(["--channel", "1234", "lookup"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == [
            "a: Wiki A",
            "b: [not connected, unavailable]",
            "Default wikis: b",
        ]


class TestArguments:
    def test_missing_subcommand_exits_two(self) -> None:
        assert _run([]) == 2

    def test_scan_requires_text(self) -> None:
        assert _run(["scan"]) == 2
