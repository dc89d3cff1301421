"""Unit tests for result assembly from raw engine groups."""

import pytest

from textdedup.errors import EngineError, ErrorCode
from textdedup.results import DuplicateResult, RawDuplicateGroup
from textdedup.session.assembler import assemble
from textdedup.session.corpus import CorpusStore

pytestmark = pytest.mark.unit


@pytest.fixture
def snapshot():
    store = CorpusStore()
    for text in ("alpha", "beta", "alpha!", "gamma", "beta.", "beta?"):
        store.append(text)
    return store.snapshot()


class TestAssemble:
    """Test building DuplicateResult values."""

    def test_index_groups(self, snapshot):
        result = assemble([[0, 2], [1, 4, 5]], snapshot, 0.9)

        assert result.stats.duplicate_groups == 2
        assert result.stats.total_items == 6
        assert result.stats.unique_items == 1
        first, second = result.duplicate_groups
        assert first.original == "alpha"
        assert first.duplicates == ("alpha!",)
        assert first.similarity == 0.9
        assert second.original == "beta"
        assert second.duplicates == ("beta.", "beta?")

    def test_scored_groups(self, snapshot):
        raw = [RawDuplicateGroup(indices=[0, 2], similarity=0.97), {"indices": [1, 4], "similarity": 0.91}]

        result = assemble(raw, snapshot, 0.8)

        assert [g.similarity for g in result.duplicate_groups] == [0.97, 0.91]

    def test_stats_invariant(self, snapshot):
        result = assemble([[3, 0, 2], [5, 1]], snapshot, 0.5)

        grouped = sum(1 + len(g.duplicates) for g in result.duplicate_groups)
        assert result.stats.unique_items == result.stats.total_items - grouped
        assert result.duplicate_groups[0].original == "gamma"

    def test_singleton_groups_ignored(self, snapshot):
        result = assemble([[0], []], snapshot, 0.9)
        assert result.stats.duplicate_groups == 0
        assert result.stats.unique_items == 6

    def test_no_groups(self, snapshot):
        result = assemble([], snapshot, 0.9)
        assert result.duplicate_groups == ()
        assert result.stats.unique_items == result.stats.total_items == 6

    def test_empty_corpus(self):
        assert assemble([], CorpusStore().snapshot(), 0.9) == DuplicateResult.empty()

    def test_deterministic(self, snapshot):
        raw = [[0, 2], [1, 4]]
        assert assemble(raw, snapshot, 0.9) == assemble(raw, snapshot, 0.9)

    def test_out_of_range_index(self, snapshot):
        with pytest.raises(EngineError) as exc:
            assemble([[0, 6]], snapshot, 0.9)
        assert exc.value.code is ErrorCode.DESERIALIZATION_ERROR

    def test_index_in_two_groups(self, snapshot):
        with pytest.raises(EngineError):
            assemble([[0, 2], [2, 3]], snapshot, 0.9)

    @pytest.mark.parametrize("raw", [["0", "1"], ["01"], [[0, True]], [{"indices": [0, 1], "similarity": 2.0}]])
    def test_malformed_groups(self, snapshot, raw):
        with pytest.raises(EngineError):
            assemble(raw, snapshot, 0.9)
