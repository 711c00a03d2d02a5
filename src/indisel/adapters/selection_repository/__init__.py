"""Selection repository adapters."""

from .memory import InMemorySelectionRepository

__all__ = ["InMemorySelectionRepository"]
