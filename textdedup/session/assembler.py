"""Convert raw engine output into display-ready duplicate groups.

Assembly is a pure function of its inputs: the same raw groups and snapshot
always produce an identical ``DuplicateResult``.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Set, Tuple, Union

from pydantic import ValidationError

from textdedup.errors import EngineError, ErrorCode
from textdedup.results import DuplicateGroup, DuplicateResult, DuplicateStats, RawDuplicateGroup
from textdedup.session.corpus import CorpusSnapshot

RawGroup = Union[Sequence[int], RawDuplicateGroup]


def _coerce_group(raw: Any) -> Tuple[List[int], Optional[float]]:
    if isinstance(raw, RawDuplicateGroup):
        return list(raw.indices), raw.similarity
    if isinstance(raw, dict):
        try:
            group = RawDuplicateGroup.model_validate(raw)
        except ValidationError as e:
            raise EngineError(f"Malformed duplicate group: {raw!r}", operation="find_duplicates",
                              code=ErrorCode.DESERIALIZATION_ERROR) from e
        return list(group.indices), group.similarity
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise EngineError(f"Malformed duplicate group: {raw!r}", operation="find_duplicates",
                          code=ErrorCode.DESERIALIZATION_ERROR)
    indices = []
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EngineError(f"Duplicate group index is not an integer: {value!r}",
                              operation="find_duplicates", code=ErrorCode.DESERIALIZATION_ERROR)
        indices.append(value)
    return indices, None


def assemble(raw_groups: Sequence[RawGroup], snapshot: CorpusSnapshot, threshold: float) -> DuplicateResult:
    """Build a ``DuplicateResult`` from engine index groups.

    Args:
        raw_groups: Groups of corpus indices; the first index of each group is
            the original. Groups may carry their own similarity score.
        snapshot: Corpus snapshot taken when the detection call was issued.
        threshold: Active similarity threshold, used as the group similarity
            when the engine reports membership only.

    Returns:
        The assembled result.

    Raises:
        EngineError: If an index is outside the snapshot or appears in more
            than one group.
    """
    groups: List[DuplicateGroup] = []
    seen: Set[int] = set()
    grouped_items = 0

    for raw in raw_groups or ():
        indices, similarity = _coerce_group(raw)
        if len(indices) < 2:
            continue

        for index in indices:
            if index in seen:
                raise EngineError(f"Corpus index {index} reported in more than one duplicate group",
                                  operation="find_duplicates", code=ErrorCode.DESERIALIZATION_ERROR)
            seen.add(index)

        try:
            texts = [snapshot.text_at(index) for index in indices]
        except IndexError as e:
            raise EngineError(str(e), operation="find_duplicates",
                              code=ErrorCode.DESERIALIZATION_ERROR) from e

        groups.append(DuplicateGroup(
            original=texts[0],
            duplicates=tuple(texts[1:]),
            similarity=threshold if similarity is None else similarity,
        ))
        grouped_items += len(indices)

    total = len(snapshot)
    stats = DuplicateStats(
        duplicate_groups=len(groups),
        total_items=total,
        unique_items=total - grouped_items,
    )
    return DuplicateResult(duplicate_groups=tuple(groups), stats=stats)
