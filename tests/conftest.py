"""Shared test fixtures."""

from __future__ import annotations

import pytest

from pulse.config import load_config
from pulse.db import get_connection, init_db
from pulse.models import RawSourceItem, SourceMetadata


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config for testing (RSS only, no network)."""
    config_text = """
sources:
  rss:
    enabled: true
    feeds:
      - url: "https://example.com/feed.xml"
        name: "Test Feed"
        category: "Reuters Top Stories"
  arxiv:
    enabled: false
  openalex:
    enabled: false
    mailto: "${PULSE_TEST_MAILTO}"
  hackernews:
    enabled: false

process:
  dedup:
    enabled: true

staging:
  min_authority: 3.0
  retention_hours:
    high_value: 168
    standard: 48

database:
  path: "DB_PATH_PLACEHOLDER"
"""
    db_path = str(tmp_path / "test.db")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("DB_PATH_PLACEHOLDER", db_path))
    return load_config(str(cfg_path))


@pytest.fixture
def db_conn(sample_config):
    """Initialized test database connection."""
    db_path = sample_config["database"]["path"]
    init_db(db_path)
    conn = get_connection(db_path)
    yield conn
    conn.close()


@pytest.fixture
def sample_items():
    """Raw items covering each category."""
    return [
        RawSourceItem(
            title="<b>AI Breakthrough</b>",
            summary="A new   model\\nbeats benchmarks.",
            url="https://arxiv.org/abs/2301.0001",
            source_name="arXiv",
            raw_category="arxiv paper",
            metadata=SourceMetadata(cited_by_count=200),
        ),
        RawSourceItem(
            title="State of AI Report",
            summary="Annual industry report.",
            url="https://example.com/report",
            source_name="Example Labs",
            raw_category="Industry Whitepaper",
        ),
        RawSourceItem(
            title="Markets rally",
            summary="<p>Stocks rose on Tuesday.</p>",
            url="https://reuters.com/markets/1",
            source_name="Reuters",
            raw_category="Reuters Top Stories",
        ),
        RawSourceItem(
            title="Managing remote teams",
            summary="Lessons from five years of distributed work.",
            url="https://hbr.org/remote",
            source_name="HBR",
            raw_category="HBR Management Tips",
            metadata=SourceMetadata(source_name="HBR"),
        ),
        RawSourceItem(
            title="Show HN: a tiny database",
            summary="",
            url="https://news.ycombinator.com/item?id=1",
            source_name="HackerNews",
            raw_category="Random Blog",
        ),
    ]
