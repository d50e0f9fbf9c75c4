"""Core data models for the pulse pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class PulseCategory(str, Enum):
    """Content taxonomy, highest to lowest baseline authority."""

    PAPER = "paper"
    REPORT = "report"
    NEWS = "news"
    ANALYSIS = "analysis"
    TREND = "trend"


@dataclass
class SourceMetadata:
    """Provider side-channel fields consulted during scoring."""

    cited_by_count: int | None = None
    source_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SourceMetadata:
        """Split an untyped provider mapping into typed fields and passthrough."""
        if not data:
            return cls()
        extra = {k: v for k, v in data.items() if k not in ("cited_by_count", "source_name")}
        cited = data.get("cited_by_count")
        try:
            cited = int(cited) if cited is not None else None
        except (TypeError, ValueError):
            cited = None
        return cls(
            cited_by_count=cited,
            source_name=data.get("source_name"),
            extra=extra,
        )


@dataclass
class RawSourceItem:
    """A harvested item before normalization."""

    title: str | None
    summary: str | None
    url: str
    source_name: str
    raw_category: str | None
    metadata: SourceMetadata = field(default_factory=SourceMetadata)


@dataclass
class PulseSignal:
    """A normalized, scored item held in the staging buffer."""

    title: str
    summary: str
    url: str
    source_name: str
    content_type: PulseCategory
    authority_score: float
    veracity_verified: bool = False
    is_high_value: bool = False
    content_hash: str = ""
    created_at: datetime | None = None
    expires_at: datetime | None = None
    id: int | None = None


@dataclass
class PulseMatch:
    """A staged signal ranked against a user's interest profile."""

    signal: PulseSignal
    similarity: float
    match_percentage: int
    relevance_label: str  # priority, relevant, exploratory


@dataclass
class HarvestRun:
    """Record of a single harvest execution."""

    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: datetime | None = None
    status: str = "running"  # running, completed, failed
    items_fetched: int = 0
    items_assembled: int = 0
    items_duplicate: int = 0
    items_discarded: int = 0
    items_stored: int = 0
    assembly_failures: int = 0
    id: int | None = None
