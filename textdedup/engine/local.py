"""In-process reference engine.

Implements the engine contract without a server, using rapidfuzz for the
edit-distance family. Semantic comparison needs an embedding backend, which
this engine does not provide; applying a Semantic strategy is rejected.

Settings that only shape semantic preprocessing or weighting (``stemming``,
``language_detection``, ``similarity_weighting``, ``adaptive_thresholding``)
are stored and echoed back but do not change local scoring. Words are not
stemmed.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Set

from textdedup.engine.base import DedupEngine, RawGroups
from textdedup.engine.text import compare, split_units
from textdedup.errors import EngineError
from textdedup.results import RawDuplicateGroup
from textdedup.strategy.models import DedupStrategy
from textdedup.utils.logger import log_debug, log_info


class LocalEngine(DedupEngine):
    """Greedy pairwise grouping over an in-memory corpus.

    Each unprocessed text becomes the original of a candidate group; every
    later unprocessed text scoring at or above the threshold joins it.
    """

    def __init__(self, strategy: Optional[DedupStrategy] = None):
        self._strategy = strategy or DedupStrategy()
        self._texts: List[str] = []

    async def update_strategy(self, strategy: DedupStrategy) -> DedupStrategy:
        if strategy.similarity_method.kind == "Semantic":
            raise EngineError("Semantic comparison requires an embedding engine; "
                              "the local engine supports Exact, Levenshtein and Fuzzy",
                              operation="update_strategy")
        self._strategy = strategy
        log_info("Local engine strategy applied", method=strategy.similarity_method.label,
                 threshold=strategy.similarity_threshold)
        return self._strategy

    async def get_strategy(self) -> DedupStrategy:
        return self._strategy

    async def add_text(self, text: str) -> int:
        self._texts.append(text)
        return len(self._texts) - 1

    async def clear(self) -> None:
        self._texts = []

    async def find_duplicates(self) -> RawGroups:
        strategy = self._strategy
        texts = list(self._texts)
        # Scoring is CPU bound; keep the event loop responsive
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._group, texts, strategy)

    @staticmethod
    def _group(texts: List[str], strategy: DedupStrategy) -> RawGroups:
        units = [split_units(text, strategy) for text in texts]
        threshold = strategy.similarity_threshold
        cap = strategy.max_duplicate_count
        processed: Set[int] = set()
        groups: RawGroups = []

        for i in range(len(texts)):
            if i in processed or not units[i]:
                continue
            processed.add(i)
            members = [i]
            scores = []

            for j in range(i + 1, len(texts)):
                if cap is not None and len(members) - 1 >= cap:
                    break
                if j in processed or not units[j]:
                    continue
                score = compare(units[i], units[j], strategy)
                if score >= threshold:
                    members.append(j)
                    scores.append(score)
                    processed.add(j)

            if len(members) > 1:
                groups.append(RawDuplicateGroup(indices=members, similarity=round(min(scores), 6)))

        log_debug("Local engine grouping finished", texts=len(texts), groups=len(groups))
        return groups
