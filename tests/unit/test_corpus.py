"""Unit tests for the corpus store."""

import pytest

from textdedup.session.corpus import CorpusItem, CorpusStore

pytestmark = pytest.mark.unit


def test_append_assigns_sequential_indices():
    store = CorpusStore()
    assert [store.append(t) for t in ("a", "b", "c")] == [0, 1, 2]
    assert store.next_index == 3
    assert len(store) == 3


def test_clear_resets_indices_and_bumps_generation():
    store = CorpusStore()
    store.append("a")

    assert store.clear() == 1
    assert store.generation == 1
    assert store.append("b") == 0


def test_snapshot_is_isolated_from_later_appends():
    store = CorpusStore()
    store.append("a")
    snapshot = store.snapshot()
    store.append("b")

    assert len(snapshot) == 1
    assert snapshot.texts == ["a"]
    assert list(snapshot) == [CorpusItem(0, "a")]
    assert snapshot.generation == 0


def test_text_at_out_of_range():
    store = CorpusStore()
    store.append("a")
    snapshot = store.snapshot()

    assert snapshot.text_at(0) == "a"
    with pytest.raises(IndexError):
        snapshot.text_at(1)
    with pytest.raises(IndexError):
        snapshot.text_at(-1)
