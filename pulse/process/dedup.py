"""Content fingerprinting, knowledge sufficiency and in-batch dedup."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Iterable

from pulse.errors import FingerprintError
from pulse.models import PulseSignal
from pulse.process import register_processor
from pulse.process.base import BaseProcessor

logger = logging.getLogger(__name__)

SUFFICIENCY_THRESHOLD = 0.85
SUFFICIENCY_MIN_MATCHES = 3


def fingerprint(text: str) -> str:
    """SHA-256 hex digest of the trimmed, lowercased text.

    Raises FingerprintError if the digest cannot be computed.
    """
    if not isinstance(text, str):
        raise FingerprintError(f"Cannot fingerprint {type(text).__name__}")
    try:
        data = text.strip().lower().encode("utf-8")
        return hashlib.sha256(data).hexdigest()
    except (UnicodeError, ValueError) as exc:
        raise FingerprintError(f"Digest failed: {exc}") from exc


def signal_fingerprint(title: str, url: str) -> str:
    """Staging dedup key for a harvested item."""
    return fingerprint(f"{(title or '').strip()}{(url or '').strip()}")


def _similarity(candidate: Any) -> float | None:
    if isinstance(candidate, dict):
        value = candidate.get("similarity")
    else:
        value = getattr(candidate, "similarity", None)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_knowledge_sufficient(
    candidates: Iterable[Any] | None,
    threshold: float = SUFFICIENCY_THRESHOLD,
    min_matches: int = SUFFICIENCY_MIN_MATCHES,
) -> bool:
    """Decide whether previously retrieved results make an external call redundant.

    A True result means the caller can skip enrichment: at least
    ``min_matches`` candidates have similarity strictly above ``threshold``.
    """
    if not candidates:
        return False

    strong = 0
    for candidate in candidates:
        sim = _similarity(candidate)
        if sim is not None and sim > threshold:
            strong += 1

    sufficient = strong >= min_matches
    logger.debug(
        "Sufficiency check: %d candidates above %.2f (need %d) -> %s",
        strong, threshold, min_matches, sufficient,
    )
    return sufficient


@register_processor("dedup")
class DedupProcessor(BaseProcessor):
    """Remove signals sharing a content hash within one batch."""

    @property
    def name(self) -> str:
        return "dedup"

    async def process(self, signals: list[PulseSignal]) -> list[PulseSignal]:
        cfg = (self.config.get("process") or {}).get("dedup") or {}
        if not cfg.get("enabled", True):
            return signals

        seen_hashes: set[str] = set()
        deduped = []
        for signal in signals:
            if not signal.content_hash:
                signal.content_hash = signal_fingerprint(signal.title, signal.url)
            if signal.content_hash in seen_hashes:
                continue
            seen_hashes.add(signal.content_hash)
            deduped.append(signal)

        removed = len(signals) - len(deduped)
        if removed:
            logger.info("Hash dedup removed %d exact duplicates", removed)

        return deduped
