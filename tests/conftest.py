from __future__ import annotations

import pytest

from models import (
    ExternalLink,
    PageRecord,
    Reference,
    RowRecord,
    RowReference,
    Section,
    TableRecord,
    UrlCandidate,
    WikiLink,
)


WIKI_HTML = """\
<!DOCTYPE html>
<html>
<head><title>Great Flood of 1910 - Wikipedia</title></head>
<body>
<h1 class="firstHeading">Great Flood of 1910</h1>
<div id="mw-content-text"><div class="mw-parser-output">
<table class="infobox">
  <tr><th>Date</th><td>1 May 1910</td></tr>
  <tr><th>Location</th><td>London</td></tr>
  <tr><th colspan="2">Header only</th></tr>
  <tr><th>Date</th><td>2 May 1910</td></tr>
</table>
<p>The Great Flood of 1910 was a severe flood that affected large parts of London and the surrounding areas.</p>
<p>Short.</p>
<p>It caused extensive damage to property and infrastructure across the river valley region.</p>
<p>A fourth paragraph that is long enough to be included but lies beyond the first three.</p>
<h2>Background</h2>
<p>Heavy rainfall in the preceding weeks saturated the ground completely.</p>
<p>Tiny.</p>
<div class="mw-heading mw-heading3"><h3 id="Causes">Causes</h3><span class="mw-editsection">[edit]</span></div>
<p>The river overflowed after three days of continuous rain upstream.</p>
<h2>Credits</h2>
<p>This paragraph follows a skipped heading and stays in the previous section.</p>
<table class="wikitable">
  <tr><th>Date</th><th>Event</th></tr>
  <tr><td>1 May</td><td><a href="/wiki/Thames">Thames</a> rises<sup class="reference"><a href="#cite_note-1">[1]</a></sup><sup class="reference"><a href="#cite_note-2">[2]</a></sup></td></tr>
  <tr><th>Sub header</th></tr>
  <tr><td>2 May</td><td>Barrier closed<sup class="reference"><a href="#cite_note-3">[3]</a></sup></td></tr>
</table>
<table class="wikitable"><tr><td>no headers here</td></tr></table>
<h2><span class="mw-headline" id="External_links">External links</span></h2>
<ul>
  <li><a href="https://flood.example.org/">Flood archive</a></li>
  <li><a href="/wiki/Internal">Internal</a></li>
</ul>
<ol class="references">
  <li id="cite_note-1"><span class="reference-text"><a class="external text" href="http://example.org/a">Report A</a></span></li>
  <li id="cite_note-3"><span class="reference-text"><a class="external text" href="http://example.org/c">Report C</a></span></li>
</ol>
</div></div>
<div id="mw-normal-catlinks"><ul>
  <li><a href="/wiki/Category:1910_floods">1910 floods</a></li>
  <li><a href="/wiki/Category:Hidden">Category:Hidden</a></li>
</ul></div>
<span class="geo">51.5; -0.12</span>
</body>
</html>
"""


@pytest.fixture
def wiki_html() -> str:
    return WIKI_HTML


@pytest.fixture
def sample_page() -> PageRecord:
    reference = Reference(
        number=1,
        id="cite_note-1",
        text="Report A",
        external_urls=[UrlCandidate(url="http://example.org/a", text="Report A", method="direct_link")],
        url="http://example.org/a",
        title="Report A",
        context="Report A",
    )
    row = RowRecord(
        cells={"Date": "1 May", "Event": "Thames rises[1]"},
        wikipedia_links=[WikiLink(url="https://en.wikipedia.org/wiki/Thames", text="Thames")],
        external_references=[RowReference(
            number=1,
            url="http://example.org/a",
            title="Report A",
            context="Report A",
            extraction_methods="direct_link",
        )],
    )
    return PageRecord(
        url="https://en.wikipedia.org/wiki/Great_Flood_of_1910",
        title="Great Flood of 1910",
        summary="The Great Flood of 1910 was a severe flood that affected London.",
        infobox={"Date": "2 May 1910", "Location": "London"},
        sections=[Section(level=2, title="Background", content=["Heavy rainfall saturated the ground."])],
        external_links=[ExternalLink(url="https://flood.example.org/", text="Flood archive")],
        references=[reference],
        categories=["1910 floods"],
        coordinates="51.5; -0.12",
        tables=[TableRecord(index=0, headers=["Date", "Event"], rows=[row])],
        scraped_at="2024-05-01T10:00:00+00:00",
    )
