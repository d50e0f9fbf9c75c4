"""arXiv export API harvester (Atom feed)."""

from __future__ import annotations

import asyncio
import logging

import feedparser
import httpx

from pulse.ingest import register_source
from pulse.ingest.base import BaseSource
from pulse.models import RawSourceItem, SourceMetadata
from pulse.retry import retry_async

logger = logging.getLogger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"
DEFAULT_QUERY = "cat:cs.AI OR cat:cs.LG"


@register_source("arxiv")
class ArxivSource(BaseSource):
    """Fetch the most recent submissions for configured arXiv queries."""

    @property
    def name(self) -> str:
        return "arxiv"

    async def fetch(self) -> list[RawSourceItem]:
        cfg = self.source_config
        queries = cfg.get("search_queries") or [DEFAULT_QUERY]
        max_results = cfg.get("max_results", 5)
        # arXiv asks clients to wait between consecutive calls
        courtesy_delay = cfg.get("courtesy_delay", 3.0)

        items = []
        for i, query in enumerate(queries):
            if i and courtesy_delay:
                await asyncio.sleep(courtesy_delay)
            try:
                xml = await retry_async(self._fetch_api, query, max_results)
                items.extend(self._parse(xml))
            except Exception:
                logger.exception("arXiv query failed: %s", query)

        logger.info("arXiv fetched %d items", len(items))
        return items

    @staticmethod
    def _parse(xml: str) -> list[RawSourceItem]:
        feed = feedparser.parse(xml)
        items = []
        for entry in feed.entries:
            url = entry.get("id") or entry.get("link", "")
            title = entry.get("title", "")
            if not url or not title:
                continue
            tags = [t.get("term", "") for t in entry.get("tags", [])]
            items.append(
                RawSourceItem(
                    title=title,
                    summary=entry.get("summary", ""),
                    url=url,
                    source_name="arXiv",
                    raw_category="arxiv paper",
                    metadata=SourceMetadata(extra={"arxiv_categories": tags}),
                )
            )
        return items

    @staticmethod
    async def _fetch_api(query: str, max_results: int) -> str:
        params = {
            "search_query": query,
            "sortBy": "submittedDate",
            "sortOrder": "descending",
            "max_results": max_results,
        }
        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.get(ARXIV_API_URL, params=params)
            resp.raise_for_status()
            return resp.text
