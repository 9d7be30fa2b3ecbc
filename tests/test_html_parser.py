"""Test di fetch ed estrattori di HTMLParser.

Le chiamate HTTP non escono mai dalla macchina: ``session.get`` viene
sostituito con un Mock che restituisce una risposta finta.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
import requests

from exceptions import FetchError
from html_parser import HTMLParser
from reference_resolver import extract_references


def _response(text: str = "<html></html>", status: int = 200, url: str = "https://en.wikipedia.org/wiki/X") -> Mock:
    response = Mock()
    response.url = url
    response.status_code = status
    response.encoding = "utf-8"
    response.text = text
    response.content = text.encode("utf-8")
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def parser() -> HTMLParser:
    return HTMLParser(timeout=5)


@pytest.fixture
def soup(parser: HTMLParser, wiki_html: str):
    return parser.make_soup(wiki_html)


# ---------------------------------------------------------------------------
# fetch_page
# ---------------------------------------------------------------------------

class TestFetchPage:
    def test_successful_fetch(self, parser: HTMLParser) -> None:
        with patch.object(parser.session, "get", return_value=_response("<p>ciao</p>")) as mock_get:
            info, html = parser.fetch_page("https://en.wikipedia.org/wiki/X")

        mock_get.assert_called_once_with("https://en.wikipedia.org/wiki/X", timeout=5, allow_redirects=True)
        assert html == "<p>ciao</p>"
        assert info["status_code"] == 200
        assert info["size_bytes"] == len("<p>ciao</p>")
        assert info["size_readable"] == "11 bytes"

    def test_fixed_identifying_headers(self, parser: HTMLParser) -> None:
        assert parser.session.headers["User-Agent"] == HTMLParser.DEFAULT_USER_AGENT
        assert "text/html" in parser.session.headers["Accept"]

    def test_custom_user_agent(self) -> None:
        assert HTMLParser(user_agent="MyBot/2.0").session.headers["User-Agent"] == "MyBot/2.0"

    def test_http_error_raises_fetch_error(self, parser: HTMLParser) -> None:
        response = _response(status=404)
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        with patch.object(parser.session, "get", return_value=response):
            with pytest.raises(FetchError) as excinfo:
                parser.fetch_page("https://en.wikipedia.org/wiki/Missing")

        assert excinfo.value.url == "https://en.wikipedia.org/wiki/Missing"
        assert isinstance(excinfo.value.cause, requests.HTTPError)

    def test_final_redirect_status_raises_fetch_error(self, parser: HTMLParser) -> None:
        response = requests.models.Response()
        response.status_code = 304
        response._content = b""
        response.url = "https://en.wikipedia.org/wiki/Cached"
        response.encoding = "utf-8"
        with patch.object(parser.session, "get", return_value=response):
            with pytest.raises(FetchError) as excinfo:
                parser.fetch_page("https://en.wikipedia.org/wiki/Cached")

        assert isinstance(excinfo.value.cause, requests.HTTPError)
        assert "304" in str(excinfo.value.cause)

    def test_timeout_raises_fetch_error(self, parser: HTMLParser) -> None:
        with patch.object(parser.session, "get", side_effect=requests.Timeout("timed out")):
            with pytest.raises(FetchError):
                parser.fetch_page("https://en.wikipedia.org/wiki/Slow")

    def test_invalid_url_is_rejected_without_request(self, parser: HTMLParser) -> None:
        with patch.object(parser.session, "get") as mock_get:
            with pytest.raises(FetchError):
                parser.fetch_page("ftp://example.org/file")
        mock_get.assert_not_called()


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

class TestExtractors:
    def test_title(self, parser: HTMLParser, soup, wiki_html: str) -> None:
        assert parser.extract_title(soup, wiki_html) == "Great Flood of 1910"

    def test_title_falls_back_to_document_title(self, parser: HTMLParser) -> None:
        html = "<html><head><title>Great Flood of the River Thames - Wikipedia</title></head><body><p>x</p></body></html>"
        title = parser.extract_title(parser.make_soup(html), html)
        assert title.startswith("Great Flood of the River Thames")

    def test_title_missing(self, parser: HTMLParser) -> None:
        assert parser.extract_title(parser.make_soup("<html><body></body></html>")) == ""

    def test_summary_uses_first_three_long_paragraphs(self, parser: HTMLParser, soup) -> None:
        summary = parser.extract_summary(soup)
        paragraphs = summary.split("\n\n")
        assert len(paragraphs) == 2
        assert paragraphs[0].startswith("The Great Flood of 1910")
        assert paragraphs[1].startswith("It caused extensive damage")
        assert "fourth paragraph" not in summary

    def test_infobox_later_duplicates_overwrite(self, parser: HTMLParser, soup) -> None:
        assert parser.extract_infobox(soup) == {"Date": "2 May 1910", "Location": "London"}

    def test_sections(self, parser: HTMLParser, soup) -> None:
        sections = parser.extract_sections(soup)
        assert [(s.level, s.title) for s in sections] == [
            (2, "Background"),
            (3, "Causes"),
            (2, "External links"),
        ]
        assert sections[0].content == ["Heavy rainfall in the preceding weeks saturated the ground completely."]
        # "Credits" contiene "edit": il paragrafo resta nella sezione precedente
        assert len(sections[1].content) == 2
        assert sections[1].content[1].startswith("This paragraph follows")

    def test_external_links(self, parser: HTMLParser, soup) -> None:
        links = parser.extract_external_links(soup)
        assert [(link.url, link.source) for link in links] == [
            ("https://flood.example.org/", None),
            ("http://example.org/a", "references"),
            ("http://example.org/c", "references"),
        ]

    def test_categories_exclude_category_prefix(self, parser: HTMLParser, soup) -> None:
        assert parser.extract_categories(soup) == ["1910 floods"]

    def test_coordinates(self, parser: HTMLParser, soup) -> None:
        assert parser.extract_coordinates(soup) == "51.5; -0.12"

    def test_tables_resolve_footnotes(self, parser: HTMLParser, soup) -> None:
        references = extract_references(soup)
        tables = parser.extract_tables(soup, references, "https://en.wikipedia.org")

        assert len(tables) == 1
        table = tables[0]
        assert table.index == 0
        assert table.headers == ["Date", "Event"]
        assert len(table.rows) == 2

        first = table.rows[0]
        assert first.cells == {"Date": "1 May", "Event": "Thames rises[1][2]"}
        assert [link.url for link in first.wikipedia_links] == ["https://en.wikipedia.org/wiki/Thames"]
        assert [(ref.number, ref.url) for ref in first.external_references] == [(1, "http://example.org/a")]

        second = table.rows[1]
        assert [(ref.number, ref.url) for ref in second.external_references] == [(3, "http://example.org/c")]

    def test_extra_cells_get_generic_header(self, parser: HTMLParser) -> None:
        html = (
            '<table class="wikitable"><tr><th>Only</th></tr>'
            '<tr><td>a</td><td>b</td></tr></table>'
        )
        tables = parser.extract_tables(parser.make_soup(html), [])
        assert tables[0].rows[0].cells == {"Only": "a", "column_1": "b"}


class TestMissingElements:
    """Una pagina senza struttura Wikipedia produce valori vuoti, mai eccezioni."""

    def test_everything_empty(self, parser: HTMLParser) -> None:
        soup = parser.make_soup("<html><body><p>nothing</p></body></html>")
        assert parser.extract_summary(soup) == ""
        assert parser.extract_infobox(soup) == {}
        assert parser.extract_sections(soup) == []
        assert parser.extract_external_links(soup) == []
        assert parser.extract_categories(soup) == []
        assert parser.extract_coordinates(soup) is None
        assert parser.extract_tables(soup, []) == []
