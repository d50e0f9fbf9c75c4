"""Harvester registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pulse.ingest.base import BaseSource

SOURCES: dict[str, type[BaseSource]] = {}


def register_source(name: str):
    """Decorator to register a harvester."""

    def decorator(cls):
        SOURCES[name] = cls
        return cls

    return decorator


# Import implementations to trigger registration
from pulse.ingest.arxiv import ArxivSource  # noqa: E402, F401
from pulse.ingest.hackernews import HackerNewsSource  # noqa: E402, F401
from pulse.ingest.openalex import OpenAlexSource  # noqa: E402, F401
from pulse.ingest.rss import RSSSource  # noqa: E402, F401
