#!/usr/bin/env python3
"""Live probe of the harvesters, printing each item's category and score.

Run from a machine with internet access (not sandboxed):

    python scripts/probe_sources.py
    python scripts/probe_sources.py --source arxiv
    python scripts/probe_sources.py --source openalex --config config.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from pulse.config import load_config
from pulse.ingest import SOURCES
from pulse.pipeline import build_assembler
from pulse.process.dedup import signal_fingerprint


async def probe(config: dict, source_name: str) -> None:
    print(f"\n[{source_name}] Fetching...")
    items = await SOURCES[source_name](config).fetch()
    batch = build_assembler(config).assemble_batch(items)

    print(f"{'=' * 60}")
    print(f"  {source_name}: {len(items)} items, {len(batch.failures)} failures")
    print(f"{'=' * 60}")
    for i, s in enumerate(batch.signals, 1):
        print(f"\n  {i}. {s.title[:80]}")
        print(f"     URL:      {s.url[:80]}")
        print(f"     Category: {s.content_type.value}  Score: {s.authority_score}"
              f"{'  (high value)' if s.is_high_value else ''}")
        print(f"     Hash:     {signal_fingerprint(s.title, s.url)[:16]}")
        print(f"     Summary:  {s.summary[:120]}...")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Probe pulse harvesters")
    parser.add_argument(
        "--source", choices=[*SOURCES, "all"], default="all",
        help="Which source to probe (default: all)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Config file path (default: config.yaml or CONFIG_PATH env)",
    )
    args = parser.parse_args()

    config_path = args.config or os.environ.get("CONFIG_PATH", "config.yaml")
    config = load_config(config_path)

    names = list(SOURCES) if args.source == "all" else [args.source]
    for name in names:
        await probe(config, name)

    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())
