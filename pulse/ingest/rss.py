"""RSS/Atom feed harvester for curated authority outlets."""

from __future__ import annotations

import logging

import feedparser
import httpx

from pulse.ingest import register_source
from pulse.ingest.base import BaseSource
from pulse.models import RawSourceItem, SourceMetadata
from pulse.retry import retry_async

logger = logging.getLogger(__name__)

DEFAULT_FEEDS = [
    {
        "url": "https://feeds.feedburner.com/hbr",
        "name": "HBR",
        "category": "hbr analysis",
    },
]


@register_source("rss")
class RSSSource(BaseSource):
    """Fetch entries from configured feeds.

    Each feed entry in config carries ``url``, ``name`` and ``category``; the
    category is passed through as the item's raw category label.
    """

    @property
    def name(self) -> str:
        return "rss"

    async def fetch(self) -> list[RawSourceItem]:
        feeds = self.source_config.get("feeds") or DEFAULT_FEEDS
        items = []

        for feed_cfg in feeds:
            url = feed_cfg["url"]
            try:
                xml = await retry_async(self._fetch_feed, url)
                items.extend(self._parse_feed(feed_cfg, xml))
            except Exception:
                logger.exception("Failed to fetch RSS feed: %s", url)

        logger.info("RSS fetched %d items", len(items))
        return items

    def _parse_feed(self, feed_cfg: dict, xml: str) -> list[RawSourceItem]:
        url = feed_cfg["url"]
        source_name = feed_cfg.get("name", url)
        category = feed_cfg.get("category", "")
        limit = feed_cfg.get("limit", self.source_config.get("limit", 10))

        feed = feedparser.parse(xml)
        items = []
        for entry in feed.entries[:limit]:
            link = entry.get("link", "")
            title = entry.get("title", "")
            if not link or not title:
                continue

            items.append(
                RawSourceItem(
                    title=title,
                    summary=entry.get("summary", "") or title,
                    url=link,
                    source_name=source_name,
                    raw_category=category,
                    metadata=SourceMetadata(source_name=source_name),
                )
            )

        return items

    @staticmethod
    async def _fetch_feed(url: str) -> str:
        async with httpx.AsyncClient(timeout=30, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
