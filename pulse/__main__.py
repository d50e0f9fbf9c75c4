"""CLI entrypoint: python -m pulse {harvest|janitor|ingest|init-db|stats|trends}."""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from pulse.config import get_active_sources, get_db_path, load_config
from pulse.db import get_connection, get_recent_runs, init_db


def setup_logging(config: dict) -> None:
    """Configure logging with console + rotating file output."""
    root = logging.getLogger()
    root.setLevel(logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    # File handler (rotate at 5MB, keep 3 backups)
    log_dir = Path(get_db_path(config)).parent
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        str(log_dir / "pulse.log"), maxBytes=5 * 1024 * 1024, backupCount=3,
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("feedparser").setLevel(logging.WARNING)


logger = logging.getLogger("pulse")


def cmd_init_db(config: dict) -> None:
    """Initialize the SQLite staging database."""
    db_path = get_db_path(config)
    init_db(db_path)
    print(f"Database initialized at {db_path}")


async def cmd_harvest(config: dict) -> None:
    """Run one harvest into the staging buffer."""
    from pulse.pipeline import run_harvest

    init_db(get_db_path(config))
    run = await run_harvest(config)
    print(f"Harvest #{run.id}: {run.items_stored} stored of {run.items_fetched} fetched")


async def cmd_janitor(config: dict) -> None:
    """Purge expired signals and trigger a fresh harvest."""
    from pulse.pipeline import run_janitor

    init_db(get_db_path(config))
    result = await run_janitor(config)
    print(f"Purged {result['purged']} expired, stored {result['stored']} new")


async def cmd_ingest(config: dict) -> None:
    """Fetch and score items without staging them (for testing sources)."""
    from pulse.ingest import SOURCES
    from pulse.pipeline import build_assembler

    assembler = build_assembler(config)
    total = 0

    for source_name in get_active_sources(config):
        if source_name not in SOURCES:
            print(f"Warning: source '{source_name}' not registered")
            continue
        items = await SOURCES[source_name](config).fetch()
        batch = assembler.assemble_batch(items)
        print(f"  {source_name}: {len(items)} items, {len(batch.failures)} failures")
        for signal in batch.signals:
            print(
                f"    [{signal.content_type.value:<8} {signal.authority_score:>4.1f}] "
                f"{signal.title[:70]}"
            )
        total += len(items)

    print(f"\nTotal: {total} items fetched")


def cmd_stats(config: dict) -> None:
    """Show recent harvest run stats."""
    conn = get_connection(get_db_path(config))
    runs = get_recent_runs(conn, limit=10)
    conn.close()

    if not runs:
        print("No harvest runs yet.")
        return

    header = (
        f"{'Run':>4} {'Status':<10} {'Fetched':<8} {'Stored':<8} "
        f"{'Dupes':<8} {'Failed':<8} {'Started'}"
    )
    print(header)
    print("-" * 70)
    for r in runs:
        print(
            f"{r['id']:>4} {r['status']:<10} "
            f"{r['items_fetched']:<8} {r['items_stored']:<8} "
            f"{r['items_duplicate']:<8} {r['assembly_failures']:<8} "
            f"{r['started_at']}"
        )


def cmd_trends(config: dict) -> None:
    """List the highest-authority active signals."""
    from pulse.match import global_trends

    conn = get_connection(get_db_path(config))
    signals = global_trends(conn, limit=20)
    conn.close()

    if not signals:
        print("Staging buffer is empty.")
        return

    for s in signals:
        marker = "*" if s.is_high_value else " "
        print(f"{marker} {s.authority_score:>4.1f} {s.content_type.value:<8} {s.title[:60]}")


COMMANDS = {
    "harvest": cmd_harvest,
    "janitor": cmd_janitor,
    "ingest": cmd_ingest,
    "init-db": cmd_init_db,
    "stats": cmd_stats,
    "trends": cmd_trends,
}


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m pulse {{{available}}}")
        sys.exit(1)

    command = sys.argv[1]
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)
    handler = COMMANDS[command]

    if asyncio.iscoroutinefunction(handler):
        asyncio.run(handler(config))
    else:
        handler(config)


if __name__ == "__main__":
    main()
