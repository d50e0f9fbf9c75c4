"""Compose normalization, categorization and scoring into PulseSignals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from pulse.errors import AssemblyError
from pulse.models import PulseSignal, RawSourceItem
from pulse.process.categories import CategoryMapper
from pulse.process.normalize import clean_content
from pulse.process.scoring import AuthorityScorer

logger = logging.getLogger(__name__)


@dataclass
class AssemblyFailure:
    """A raw item that could not be assembled."""

    index: int
    item: RawSourceItem
    error: Exception


@dataclass
class BatchResult:
    signals: list[PulseSignal] = field(default_factory=list)
    failures: list[AssemblyFailure] = field(default_factory=list)


class PulseAssembler:
    """Turn a RawSourceItem into a staging-ready PulseSignal.

    The returned signal carries no id, timestamps or content hash; those are
    assigned by the caller when staging it.
    """

    def __init__(
        self,
        mapper: CategoryMapper | None = None,
        scorer: AuthorityScorer | None = None,
    ):
        self.mapper = mapper or CategoryMapper()
        self.scorer = scorer or AuthorityScorer()

    def assemble(self, item: RawSourceItem) -> PulseSignal:
        category = self.mapper.map(item.raw_category)
        score = self.scorer.score(category, item.metadata)

        return PulseSignal(
            title=clean_content(item.title),
            summary=clean_content(item.summary),
            url=item.url,
            source_name=item.source_name,
            content_type=category,
            authority_score=score,
            veracity_verified=False,
            is_high_value=self.scorer.is_high_value(score),
        )

    def assemble_batch(self, items: Iterable[RawSourceItem]) -> BatchResult:
        """Assemble each item independently; one bad item never aborts the rest."""
        result = BatchResult()
        for index, item in enumerate(items):
            try:
                result.signals.append(self.assemble(item))
            except Exception as exc:
                logger.warning(
                    "Assembly failed for item %d (%s): %s",
                    index, getattr(item, "url", "?"), exc,
                )
                error = AssemblyError(str(exc), index=index)
                error.__cause__ = exc
                result.failures.append(
                    AssemblyFailure(index=index, item=item, error=error)
                )

        if result.failures:
            logger.info(
                "Assembled %d signals, %d failures",
                len(result.signals), len(result.failures),
            )
        return result
