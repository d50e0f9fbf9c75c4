"""Authority scoring for normalized pulse items."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from pulse.models import PulseCategory, SourceMetadata

DEFAULT_WEIGHTS: Mapping[PulseCategory, float] = MappingProxyType({
    PulseCategory.PAPER: 10.0,
    PulseCategory.REPORT: 8.5,
    PulseCategory.NEWS: 7.0,
    PulseCategory.ANALYSIS: 5.0,
    PulseCategory.TREND: 3.0,
})

DEFAULT_TRUSTED_SOURCES = frozenset({"The Economist", "Nature", "HBR", "MIT Tech Review"})


@dataclass(frozen=True)
class ScoringTables:
    """Immutable weights, bonuses and bounds used by AuthorityScorer."""

    weights: Mapping[PulseCategory, float] = field(default_factory=lambda: DEFAULT_WEIGHTS)
    default_weight: float = 1.0
    citation_threshold: int = 100
    citation_bonus: float = 0.5
    trusted_sources: frozenset[str] = DEFAULT_TRUSTED_SOURCES
    trusted_bonus: float = 1.0
    min_score: float = 1.0
    max_score: float = 10.0
    high_value_threshold: float = 8.5


class AuthorityScorer:
    """Compute a 1.0-10.0 trust weight from category and metadata."""

    def __init__(self, tables: ScoringTables | None = None):
        self.tables = tables or ScoringTables()

    def score(
        self, category: PulseCategory | str, metadata: SourceMetadata | None = None,
    ) -> float:
        t = self.tables
        metadata = metadata or SourceMetadata()
        try:
            category = PulseCategory(category)
        except ValueError:
            pass

        score = t.weights.get(category, t.default_weight)

        # Each bonus is clamped to max_score as it is applied
        if (
            category == PulseCategory.PAPER
            and metadata.cited_by_count is not None
            and metadata.cited_by_count > t.citation_threshold
        ):
            score = min(t.max_score, score + t.citation_bonus)

        if metadata.source_name and metadata.source_name in t.trusted_sources:
            score = min(t.max_score, score + t.trusted_bonus)

        score = max(t.min_score, min(t.max_score, score))
        return round(score, 1)

    def is_high_value(self, score: float) -> bool:
        return score >= self.tables.high_value_threshold
