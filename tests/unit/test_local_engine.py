"""Unit tests for the in-process engine."""

import pytest

from textdedup.engine.local import LocalEngine
from textdedup.errors import EngineError
from textdedup.results import RawDuplicateGroup
from textdedup.strategy.models import DedupStrategy
from textdedup.strategy.presets import get_catalog

pytestmark = pytest.mark.engine


async def load(engine, *texts):
    return [await engine.add_text(t) for t in texts]


class TestLocalEngine:
    """Test the engine contract on the local engine."""

    @pytest.mark.asyncio
    async def test_indices_and_clear(self):
        engine = LocalEngine()
        assert await load(engine, "a", "b") == [0, 1]

        await engine.clear()

        assert await engine.add_text("c") == 0

    @pytest.mark.asyncio
    async def test_strategy_roundtrip(self):
        engine = LocalEngine()
        strategy = DedupStrategy(similarity_method="Levenshtein")

        assert await engine.update_strategy(strategy) == strategy
        assert await engine.get_strategy() == strategy

    @pytest.mark.asyncio
    async def test_rejects_semantic(self):
        engine = LocalEngine()
        with pytest.raises(EngineError):
            await engine.update_strategy(get_catalog().get("Similar Ideas").settings)
        assert (await engine.get_strategy()).similarity_method.kind == "Exact"

    @pytest.mark.asyncio
    async def test_always_ready(self):
        engine = LocalEngine()
        assert engine.supports_ready_signal is False
        assert await engine.is_ready() is True

    @pytest.mark.asyncio
    async def test_exact_whole_text(self, whole_text_exact):
        engine = LocalEngine(whole_text_exact)
        await load(engine, "The quick brown fox", "other text", "the quick brown fox.")

        groups = await engine.find_duplicates()

        assert groups == [RawDuplicateGroup(indices=[0, 2], similarity=1.0)]

    @pytest.mark.asyncio
    async def test_levenshtein_scores_group(self):
        engine = LocalEngine(DedupStrategy(similarity_method="Levenshtein", split_strategy="WholeText",
                                           similarity_threshold=0.5))
        await load(engine, "kitten", "sitting")

        groups = await engine.find_duplicates()

        assert groups[0].indices == [0, 1]
        assert groups[0].similarity == pytest.approx(0.571429)

    @pytest.mark.asyncio
    async def test_typo_tolerant_preset(self):
        engine = LocalEngine(get_catalog().get("Typo Tolerant").settings)
        await load(engine, "Please recieve the package", "please receive the package", "unrelated words here")

        groups = await engine.find_duplicates()

        assert [g.indices for g in groups] == [[0, 1]]

    @pytest.mark.asyncio
    async def test_max_duplicate_count(self, whole_text_exact):
        engine = LocalEngine(whole_text_exact.with_changes(max_duplicate_count=1))
        await load(engine, "x", "x", "x")

        groups = await engine.find_duplicates()

        assert [g.indices for g in groups] == [[0, 1]]

    @pytest.mark.asyncio
    async def test_short_texts_never_match(self):
        engine = LocalEngine(DedupStrategy(split_strategy="WholeText", min_length=50))
        await load(engine, "same", "same")

        assert await engine.find_duplicates() == []
