"""Contract the session controller requires from a comparison engine.

The engine is stateful: it holds the applied strategy and its own copy of the
corpus, and reports duplicate membership as indices into that corpus.
"""

from __future__ import annotations

import abc
from typing import List, Sequence, Union

from textdedup.results import RawDuplicateGroup
from textdedup.strategy.models import DedupStrategy

RawGroups = List[Union[Sequence[int], RawDuplicateGroup]]


class DedupEngine(abc.ABC):
    """Abstract base for comparison engines.

    Readiness: after a strategy whose method needs warm-up (semantic
    comparison), the engine may not be able to answer detection requests
    right away. Engines that can signal completion set
    ``supports_ready_signal`` and implement ``wait_until_ready``; the others
    may override ``is_ready`` so the controller can poll it.
    """

    supports_ready_signal: bool = False

    @abc.abstractmethod
    async def update_strategy(self, strategy: DedupStrategy) -> DedupStrategy:
        """Apply a strategy and echo back the resolved strategy."""

    @abc.abstractmethod
    async def get_strategy(self) -> DedupStrategy:
        """Return the currently applied strategy."""

    @abc.abstractmethod
    async def add_text(self, text: str) -> int:
        """Append to the engine-side corpus and return the new index."""

    @abc.abstractmethod
    async def clear(self) -> None:
        """Reset the engine-side corpus."""

    @abc.abstractmethod
    async def find_duplicates(self) -> RawGroups:
        """Run detection over the current strategy and corpus."""

    async def wait_until_ready(self) -> None:
        """Resolve once the engine can answer detection requests."""
        raise NotImplementedError(f"{type(self).__name__} has no readiness signal")

    async def is_ready(self) -> bool:
        return True

    async def connect(self) -> None:
        """Acquire engine resources (connections, models)."""

    async def aclose(self) -> None:
        """Release engine resources."""

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
