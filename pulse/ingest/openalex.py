"""OpenAlex works API harvester."""

from __future__ import annotations

import logging

import httpx

from pulse.ingest import register_source
from pulse.ingest.base import BaseSource
from pulse.models import RawSourceItem, SourceMetadata
from pulse.retry import retry_async

logger = logging.getLogger(__name__)

OPENALEX_WORKS_URL = "https://api.openalex.org/works"
DEFAULT_FILTER = "default_host_group.id:https://openalex.org/S4306400030"


def rebuild_abstract(inverted_index: dict | None) -> str:
    """Turn OpenAlex's word -> positions index back into plain text."""
    if not inverted_index:
        return ""
    positioned = []
    for word, positions in inverted_index.items():
        for pos in positions:
            positioned.append((pos, word))
    positioned.sort()
    return " ".join(word for _, word in positioned)


@register_source("openalex")
class OpenAlexSource(BaseSource):
    """Fetch recent scholarly works, keeping citation counts for scoring."""

    @property
    def name(self) -> str:
        return "openalex"

    async def fetch(self) -> list[RawSourceItem]:
        cfg = self.source_config
        try:
            data = await retry_async(
                self._fetch_api,
                cfg.get("filter", DEFAULT_FILTER),
                cfg.get("per_page", 5),
                cfg.get("mailto", ""),
            )
        except Exception:
            logger.exception("OpenAlex request failed")
            return []

        items = []
        for work in data.get("results", []):
            title = work.get("title") or work.get("display_name") or ""
            url = work.get("doi") or work.get("id") or ""
            if not title or not url:
                continue

            summary = rebuild_abstract(work.get("abstract_inverted_index"))
            if not summary:
                summary = work.get("display_name") or title

            items.append(
                RawSourceItem(
                    title=title,
                    summary=summary,
                    url=url,
                    source_name="OpenAlex",
                    raw_category="journal paper",
                    metadata=SourceMetadata(
                        cited_by_count=work.get("cited_by_count"),
                        extra={"publication_date": work.get("publication_date")},
                    ),
                )
            )

        logger.info("OpenAlex fetched %d items", len(items))
        return items

    @staticmethod
    async def _fetch_api(filter_expr: str, per_page: int, mailto: str) -> dict:
        params = {
            "filter": filter_expr,
            "sort": "publication_date:desc",
            "per_page": per_page,
        }
        # OpenAlex routes identified clients to its polite pool
        user_agent = "pulse-harvester/0.1"
        if mailto:
            user_agent += f" (mailto:{mailto})"
            params["mailto"] = mailto
        async with httpx.AsyncClient(timeout=30, headers={"User-Agent": user_agent}) as client:
            resp = await client.get(OPENALEX_WORKS_URL, params=params)
            resp.raise_for_status()
            return resp.json()
