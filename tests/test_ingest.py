"""Tests for feed-based harvesters (RSS and arXiv) and the OpenAlex harvester."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from pulse.ingest import SOURCES
from pulse.ingest.arxiv import ArxivSource
from pulse.ingest.openalex import OpenAlexSource, rebuild_abstract
from pulse.ingest.rss import RSSSource


class FakeEntry(dict):
    """Dict subclass that also supports attribute access (like feedparser)."""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)


def _feed(entries):
    return type("Feed", (), {"entries": [FakeEntry(e) for e in entries]})()


@pytest.fixture
def rss_config():
    return {
        "sources": {
            "rss": {
                "enabled": True,
                "feeds": [
                    {
                        "url": "https://example.com/feed.xml",
                        "name": "HBR",
                        "category": "hbr analysis",
                    },
                ],
            }
        }
    }


def test_registry_has_all_sources():
    assert set(SOURCES) >= {"arxiv", "openalex", "hackernews", "rss"}


# --- RSS ---

HBR_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>HBR</title>
    <item>
      <title>Managing Remote Teams</title>
      <link>https://hbr.org/remote</link>
      <description>Practical advice for managers.</description>
    </item>
  </channel>
</rss>
"""


@pytest.mark.asyncio
@patch("pulse.ingest.rss.RSSSource._fetch_feed", new_callable=AsyncMock)
@patch("pulse.ingest.rss.feedparser")
async def test_rss_fetches_items(mock_fp, mock_fetch, rss_config):
    """RSS source maps feed entries to raw items carrying the feed category."""
    mock_fetch.return_value = "<rss/>"
    mock_fp.parse.return_value = _feed([
        {
            "title": "How to lead",
            "link": "https://hbr.org/lead",
            "summary": "<p>Leadership advice.</p>",
        },
        {"title": "No summary", "link": "https://hbr.org/none", "summary": ""},
    ])

    items = await RSSSource(rss_config).fetch()

    mock_fetch.assert_awaited_once_with("https://example.com/feed.xml")
    mock_fp.parse.assert_called_once_with("<rss/>")
    assert len(items) == 2
    assert items[0].title == "How to lead"
    assert items[0].source_name == "HBR"
    assert items[0].raw_category == "hbr analysis"
    assert items[0].metadata.source_name == "HBR"
    assert items[1].summary == "No summary"


@pytest.mark.asyncio
@patch("pulse.ingest.rss.RSSSource._fetch_feed", new_callable=AsyncMock)
async def test_rss_parses_downloaded_xml(mock_fetch, rss_config):
    """Downloaded feed text goes through feedparser."""
    mock_fetch.return_value = HBR_RSS

    items = await RSSSource(rss_config).fetch()

    assert len(items) == 1
    assert items[0].title == "Managing Remote Teams"
    assert items[0].url == "https://hbr.org/remote"
    assert items[0].summary == "Practical advice for managers."


@pytest.mark.asyncio
@patch("pulse.ingest.rss.RSSSource._fetch_feed", new_callable=AsyncMock)
@patch("pulse.ingest.rss.feedparser")
async def test_rss_skips_entries_without_link(mock_fp, mock_fetch, rss_config):
    """Entries missing link or title are skipped."""
    mock_fetch.return_value = "<rss/>"
    mock_fp.parse.return_value = _feed([
        {"title": "Has Title", "link": "", "summary": "content"},
        {"title": "", "link": "https://example.com", "summary": "content"},
    ])
    assert await RSSSource(rss_config).fetch() == []


@pytest.mark.asyncio
@patch("pulse.ingest.rss.RSSSource._fetch_feed", new_callable=AsyncMock)
async def test_rss_feed_failure_is_isolated(mock_fetch, rss_config):
    rss_config["sources"]["rss"]["feeds"].append(
        {"url": "https://example.com/ok.xml", "name": "OK", "category": "news"},
    )
    request = httpx.Request("GET", "https://example.com/feed.xml")
    mock_fetch.side_effect = [
        httpx.HTTPStatusError(
            "Not Found", request=request, response=httpx.Response(404, request=request),
        ),
        HBR_RSS,
    ]
    items = await RSSSource(rss_config).fetch()
    assert [i.title for i in items] == ["Managing Remote Teams"]
    assert items[0].source_name == "OK"


# --- arXiv ---

ARXIV_ATOM = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>arXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/2301.00001v1</id>
    <title>Scaling Laws for Tiny Models</title>
    <summary>We study   scaling laws.</summary>
    <category term="cs.LG"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2301.00002v1</id>
    <title>Agents That Plan</title>
    <summary>Planning with language models.</summary>
  </entry>
</feed>
"""


@pytest.mark.asyncio
@patch("pulse.ingest.arxiv.ArxivSource._fetch_api", new_callable=AsyncMock)
async def test_arxiv_parses_atom(mock_fetch):
    mock_fetch.return_value = ARXIV_ATOM
    config = {"sources": {"arxiv": {"enabled": True, "courtesy_delay": 0}}}

    items = await ArxivSource(config).fetch()

    assert len(items) == 2
    assert items[0].title == "Scaling Laws for Tiny Models"
    assert items[0].url == "http://arxiv.org/abs/2301.00001v1"
    assert items[0].source_name == "arXiv"
    assert items[0].raw_category == "arxiv paper"
    assert items[0].metadata.extra["arxiv_categories"] == ["cs.LG"]


@pytest.mark.asyncio
@patch("pulse.ingest.arxiv.ArxivSource._fetch_api", new_callable=AsyncMock)
async def test_arxiv_query_failure_returns_empty(mock_fetch):
    mock_fetch.side_effect = ValueError("bad response")
    config = {"sources": {"arxiv": {"enabled": True, "courtesy_delay": 0}}}
    assert await ArxivSource(config).fetch() == []


# --- OpenAlex ---

OPENALEX_RESPONSE = {
    "results": [
        {
            "id": "https://openalex.org/W1",
            "doi": "https://doi.org/10.1000/xyz",
            "title": "Deep Learning Survey",
            "display_name": "Deep Learning Survey",
            "cited_by_count": 420,
            "abstract_inverted_index": {"Deep": [0], "learning": [1], "works.": [2]},
        },
        {
            "id": "https://openalex.org/W2",
            "doi": None,
            "title": "Untitled Preprint",
            "display_name": "Untitled Preprint",
            "cited_by_count": 3,
            "abstract_inverted_index": None,
        },
        {"id": "", "title": ""},
    ],
}


def test_rebuild_abstract_orders_by_position():
    index = {"world": [1], "hello": [0, 2]}
    assert rebuild_abstract(index) == "hello world hello"
    assert rebuild_abstract(None) == ""


@pytest.mark.asyncio
@patch("pulse.ingest.openalex.OpenAlexSource._fetch_api", new_callable=AsyncMock)
async def test_openalex_maps_works(mock_fetch):
    mock_fetch.return_value = OPENALEX_RESPONSE
    config = {"sources": {"openalex": {"enabled": True, "mailto": "ops@example.com"}}}

    items = await OpenAlexSource(config).fetch()

    assert len(items) == 2
    assert items[0].url == "https://doi.org/10.1000/xyz"
    assert items[0].summary == "Deep learning works."
    assert items[0].metadata.cited_by_count == 420
    assert items[0].raw_category == "journal paper"
    assert items[1].url == "https://openalex.org/W2"
    assert items[1].summary == "Untitled Preprint"
    assert mock_fetch.call_args.args[2] == "ops@example.com"


@pytest.mark.asyncio
@patch("pulse.ingest.openalex.OpenAlexSource._fetch_api", new_callable=AsyncMock)
async def test_openalex_failure_returns_empty(mock_fetch):
    mock_fetch.side_effect = Exception("Connection refused")
    assert await OpenAlexSource({"sources": {"openalex": {}}}).fetch() == []
