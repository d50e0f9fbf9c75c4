"""Abstract base class for processors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pulse.models import PulseSignal


class BaseProcessor(ABC):
    """Base class for signal processing steps."""

    def __init__(self, config: dict):
        self.config = config

    @abstractmethod
    async def process(self, signals: list[PulseSignal]) -> list[PulseSignal]:
        """Process signals and return the filtered/modified list."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Processor name."""
        ...
