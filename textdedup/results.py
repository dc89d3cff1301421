"""Data classes for duplicate detection results."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class DuplicateGroup(BaseModel):
    """One original passage and the passages that duplicate it.

    Attributes:
        original: The first member of the group, in corpus order.
        duplicates: Remaining members, in the order the engine reported them.
        similarity: Engine score for the group, or the active threshold when
            the engine reports membership only.
    """

    model_config = ConfigDict(frozen=True)

    original: str
    duplicates: Tuple[str, ...]
    similarity: float


class DuplicateStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    duplicate_groups: int = 0
    total_items: int = 0
    unique_items: int = 0


class DuplicateResult(BaseModel):
    """Display-ready output of one detection request."""

    model_config = ConfigDict(frozen=True)

    duplicate_groups: Tuple[DuplicateGroup, ...] = ()
    stats: DuplicateStats = Field(default_factory=DuplicateStats)

    @classmethod
    def empty(cls) -> "DuplicateResult":
        return cls(duplicate_groups=(), stats=DuplicateStats())


class RawDuplicateGroup(BaseModel):
    """Engine output for one group: corpus indices plus an optional score."""

    model_config = ConfigDict(frozen=True)

    indices: List[int]
    similarity: Optional[float] = Field(None, ge=0.0, le=1.0)
