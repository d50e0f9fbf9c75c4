"""Exception types raised by the pulse pipeline."""

from __future__ import annotations


class PulseError(Exception):
    """Base class for pulse pipeline errors."""


class FingerprintError(PulseError):
    """Content digest could not be computed; the item cannot be deduplicated."""


class AssemblyError(PulseError):
    """A single raw item could not be turned into a signal."""

    def __init__(self, message: str, index: int | None = None):
        super().__init__(message)
        self.index = index


class StoreError(PulseError):
    """Staging store operation failed."""
