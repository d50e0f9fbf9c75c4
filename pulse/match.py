"""Rank staged signals against a user's interest profile."""

from __future__ import annotations

import logging
import sqlite3
from typing import Iterable

from pulse.config import get_matcher_config
from pulse.db import get_top_signals
from pulse.models import PulseMatch, PulseSignal

logger = logging.getLogger(__name__)

DEFAULT_LABELS = {"priority": 0.85, "relevant": 0.75}


def relevance_label(similarity: float, labels: dict[str, float] | None = None) -> str:
    labels = labels or DEFAULT_LABELS
    if similarity >= labels["priority"]:
        return "priority"
    if similarity >= labels["relevant"]:
        return "relevant"
    return "exploratory"


def _is_noise(signal: PulseSignal, negative_interests: list[str]) -> bool:
    title = signal.title.lower()
    summary = signal.summary.lower()
    for noise in negative_interests:
        noise = noise.lower().strip()
        if noise and (noise in title or noise in summary):
            return True
    return False


def match_signals(
    candidates: Iterable[tuple[PulseSignal, float]],
    negative_interests: list[str] | None = None,
    min_similarity: float = 0.65,
    limit: int = 20,
    labels: dict[str, float] | None = None,
) -> list[PulseMatch]:
    """Filter and rank (signal, similarity) pairs for one user.

    Pairs below ``min_similarity`` or mentioning any negative interest in the
    title or summary are dropped. Results are ordered by similarity, then
    authority.
    """
    negative_interests = negative_interests or []
    kept = []
    dropped_noise = 0
    for signal, similarity in candidates:
        if similarity < min_similarity:
            continue
        if _is_noise(signal, negative_interests):
            dropped_noise += 1
            continue
        kept.append((signal, similarity))

    kept.sort(key=lambda pair: (pair[1], pair[0].authority_score), reverse=True)

    if dropped_noise:
        logger.debug("Matcher dropped %d signals as negative interests", dropped_noise)

    return [
        PulseMatch(
            signal=signal,
            similarity=similarity,
            match_percentage=round(similarity * 100),
            relevance_label=relevance_label(similarity, labels),
        )
        for signal, similarity in kept[:limit]
    ]


def global_trends(conn: sqlite3.Connection, limit: int = 20) -> list[PulseSignal]:
    """Fallback feed for users without an interest profile."""
    return get_top_signals(conn, limit=limit)


def match_for_profile(
    config: dict,
    candidates: Iterable[tuple[PulseSignal, float]],
    negative_interests: list[str] | None = None,
) -> list[PulseMatch]:
    """match_signals with the configured limit, similarity floor and labels."""
    cfg = get_matcher_config(config)
    return match_signals(
        candidates,
        negative_interests=negative_interests,
        min_similarity=cfg["min_similarity"],
        limit=cfg["limit"],
        labels=cfg["labels"],
    )
