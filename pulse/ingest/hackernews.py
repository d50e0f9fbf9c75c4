"""Hacker News harvester via the Algolia search API."""

from __future__ import annotations

import logging

import httpx

from pulse.ingest import register_source
from pulse.ingest.base import BaseSource
from pulse.models import RawSourceItem, SourceMetadata
from pulse.retry import retry_async

logger = logging.getLogger(__name__)

HN_ALGOLIA_URL = "https://hn.algolia.com/api/v1/search_by_date"


@register_source("hackernews")
class HackerNewsSource(BaseSource):
    """Fetch the latest community stories from Hacker News."""

    @property
    def name(self) -> str:
        return "hackernews"

    async def fetch(self) -> list[RawSourceItem]:
        cfg = self.source_config
        queries = cfg.get("queries") or [""]
        min_points = cfg.get("min_points", 0)
        limit = cfg.get("limit", 5)

        items = []
        for query in queries:
            try:
                items.extend(await self._search(query, min_points, limit))
            except Exception:
                logger.exception("HN search failed for query '%s'", query)

        logger.info("HN fetched %d items", len(items))
        return items

    async def _search(self, query: str, min_points: int, limit: int) -> list[RawSourceItem]:
        data = await retry_async(self._fetch_api, query, limit)

        items = []
        for hit in data.get("hits", []):
            title = hit.get("title", "")
            if not title:
                continue

            points = hit.get("points") or 0
            if points < min_points:
                continue

            url = hit.get("url", "")
            story_id = hit.get("objectID", "")
            if not url and story_id:
                url = f"https://news.ycombinator.com/item?id={story_id}"
            if not url:
                continue

            items.append(
                RawSourceItem(
                    title=title,
                    summary=hit.get("story_text") or title,
                    url=url,
                    source_name="HackerNews",
                    raw_category="community trend",
                    metadata=SourceMetadata(
                        extra={"points": points, "author": hit.get("author", "")},
                    ),
                )
            )

        return items

    @staticmethod
    async def _fetch_api(query: str, limit: int) -> dict:
        params = {"tags": "story", "hitsPerPage": limit}
        if query:
            params["query"] = query
        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.get(HN_ALGOLIA_URL, params=params)
            resp.raise_for_status()
            return resp.json()
