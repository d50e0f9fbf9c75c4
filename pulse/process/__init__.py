"""Processor registry for batch-level signal processing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pulse.process.base import BaseProcessor

PROCESSORS: dict[str, type[BaseProcessor]] = {}


def register_processor(name: str):
    """Decorator to register a processor."""

    def decorator(cls):
        PROCESSORS[name] = cls
        return cls

    return decorator


from pulse.process.dedup import DedupProcessor  # noqa: E402, F401
