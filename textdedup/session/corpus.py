"""Ordered, index-stable store of submitted texts.

Indices are the only addressing scheme the engine uses to report duplicate
membership, so they are never reordered or reused within a generation.
``clear`` starts a new generation; snapshots remember which generation they
were taken in so late engine responses can be matched against the right one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple


@dataclass(frozen=True)
class CorpusItem:
    index: int
    text: str


@dataclass(frozen=True)
class CorpusSnapshot:
    """Read-only view of the corpus at one moment."""

    generation: int
    items: Tuple[CorpusItem, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[CorpusItem]:
        return iter(self.items)

    def text_at(self, index: int) -> str:
        """Resolve an engine-reported index to its text.

        Raises:
            IndexError: If the index is outside this snapshot.
        """
        if index < 0 or index >= len(self.items):
            raise IndexError(f"Index {index} outside corpus of {len(self.items)} items")
        return self.items[index].text

    @property
    def texts(self) -> List[str]:
        return [item.text for item in self.items]


class CorpusStore:
    """Append-only corpus with whole-store clears."""

    def __init__(self):
        self._items: List[CorpusItem] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def next_index(self) -> int:
        return len(self._items)

    def append(self, text: str) -> int:
        """Store ``text`` under the next sequential index and return it."""
        item = CorpusItem(index=len(self._items), text=text)
        self._items.append(item)
        return item.index

    def clear(self) -> int:
        """Discard all items, reset the index counter and start a new generation.

        Returns:
            The new generation number.
        """
        self._items = []
        self._generation += 1
        return self._generation

    def snapshot(self) -> CorpusSnapshot:
        return CorpusSnapshot(generation=self._generation, items=tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)
