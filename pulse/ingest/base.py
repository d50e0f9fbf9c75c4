"""Abstract base class for all harvesters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pulse.models import RawSourceItem


class BaseSource(ABC):
    """Base class for external signal harvesters."""

    def __init__(self, config: dict):
        self.config = config

    @property
    def source_config(self) -> dict:
        return (self.config.get("sources") or {}).get(self.name) or {}

    @abstractmethod
    async def fetch(self) -> list[RawSourceItem]:
        """Fetch the latest items from this source."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the source."""
        ...
