"""Harvest orchestrator: fetch, assemble, dedup, stage; plus the janitor task."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from pulse.config import (
    get_active_sources,
    get_db_path,
    get_min_authority,
    get_retention_hours,
    get_scoring_tables,
    get_sufficiency_config,
)
from pulse.db import (
    delete_expired,
    finish_run,
    get_connection,
    insert_run,
    insert_signal,
    signal_exists,
)
from pulse.errors import FingerprintError
from pulse.ingest import SOURCES
from pulse.models import HarvestRun, PulseSignal, RawSourceItem
from pulse.process.assemble import PulseAssembler
from pulse.process.categories import CategoryMapper
from pulse.process import PROCESSORS
from pulse.process.dedup import is_knowledge_sufficient, signal_fingerprint
from pulse.process.scoring import AuthorityScorer

logger = logging.getLogger(__name__)


def build_assembler(config: dict) -> PulseAssembler:
    """Assembler wired with the configured scoring tables."""
    return PulseAssembler(CategoryMapper(), AuthorityScorer(get_scoring_tables(config)))


def stamp_lifecycle(
    signal: PulseSignal, retention_hours: dict[str, int], now: datetime,
) -> PulseSignal:
    """Set created_at and the retention-dependent expires_at."""
    hours = retention_hours["high_value" if signal.is_high_value else "standard"]
    signal.created_at = now
    signal.expires_at = now + timedelta(hours=hours)
    return signal


async def fetch_all(config: dict) -> list[RawSourceItem]:
    """Fetch from every active registered source concurrently."""
    active_sources = get_active_sources(config)

    async def _fetch(source_name: str) -> list[RawSourceItem]:
        try:
            source = SOURCES[source_name](config)
            return await source.fetch()
        except Exception:
            logger.exception("Source '%s' failed", source_name)
            return []

    valid_sources = [s for s in active_sources if s in SOURCES]
    for s in active_sources:
        if s not in SOURCES:
            logger.warning("Source '%s' enabled but not registered", s)

    results = await asyncio.gather(*[_fetch(name) for name in valid_sources])
    return [item for batch in results for item in batch]


async def run_harvest(config: dict) -> HarvestRun:
    """Execute one harvest into the staging buffer."""
    conn = get_connection(get_db_path(config))
    run = HarvestRun()
    run_id = insert_run(conn, run)
    run.id = run_id
    logger.info("Harvest run #%d started", run_id)

    try:
        raw_items = await fetch_all(config)
        run.items_fetched = len(raw_items)
        logger.info("Fetched %d raw items", len(raw_items))

        batch = build_assembler(config).assemble_batch(raw_items)
        run.assembly_failures = len(batch.failures)

        hashed = []
        for signal in batch.signals:
            try:
                signal.content_hash = signal_fingerprint(signal.title, signal.url)
            except FingerprintError:
                logger.exception("Fingerprint failed for %s", signal.url)
                run.assembly_failures += 1
                continue
            hashed.append(signal)
        run.items_assembled = len(hashed)

        signals = hashed
        for name, processor_cls in PROCESSORS.items():
            signals = await processor_cls(config).process(signals)
            logger.debug("Processor '%s' left %d signals", name, len(signals))
        run.items_duplicate = len(hashed) - len(signals)

        min_authority = get_min_authority(config)
        retention = get_retention_hours(config)
        now = datetime.utcnow()

        for signal in signals:
            if signal_exists(conn, signal.content_hash):
                run.items_duplicate += 1
                continue
            if signal.authority_score < min_authority:
                run.items_discarded += 1
                continue

            stamp_lifecycle(signal, retention, now)
            signal.id = insert_signal(conn, signal, run_id)
            if signal.id is None:
                run.items_duplicate += 1
            else:
                run.items_stored += 1

        run.status = "completed"
        run.finished_at = datetime.utcnow()
        finish_run(conn, run_id, run)
        logger.info(
            "Harvest run #%d completed: %d fetched, %d stored, "
            "%d duplicates, %d discarded, %d failures",
            run_id, run.items_fetched, run.items_stored,
            run.items_duplicate, run.items_discarded, run.assembly_failures,
        )
        return run

    except Exception:
        logger.exception("Harvest run #%d failed", run_id)
        run.status = "failed"
        run.finished_at = datetime.utcnow()
        finish_run(conn, run_id, run)
        raise
    finally:
        conn.close()


async def run_janitor(config: dict, harvest: bool = True) -> dict:
    """Purge expired staging rows, then trigger a fresh harvest."""
    conn = get_connection(get_db_path(config))
    try:
        purged = delete_expired(conn)
    finally:
        conn.close()
    logger.info("Janitor purged %d expired signals", purged)

    stored = 0
    if harvest:
        run = await run_harvest(config)
        stored = run.items_stored

    return {"purged": purged, "stored": stored}


def should_skip_enrichment(config: dict, candidates) -> bool:
    """Sufficiency gate with configured threshold; True means skip the external call."""
    cfg = get_sufficiency_config(config)
    return is_knowledge_sufficient(
        candidates, threshold=cfg["threshold"], min_matches=cfg["min_matches"],
    )
