"""Unit tests for canonicalization, splitting and scoring."""

import pytest

from textdedup.engine.text import canonicalize, compare, score_pair, soundex, split_units
from textdedup.strategy.models import DedupStrategy

pytestmark = pytest.mark.engine


def strategy(**kwargs):
    return DedupStrategy(**kwargs)


class TestCanonicalize:
    """Test normalization rules."""

    def test_punctuation_and_whitespace(self):
        s = strategy(ignore_punctuation=True)
        assert canonicalize("Hello,  World!", s) == "hello world"

    def test_case_sensitive(self):
        assert canonicalize("Hello", strategy(case_sensitive=True)) == "Hello"

    def test_unicode_normalization(self):
        assert canonicalize("\ufb01le", strategy(normalize_unicode=True)) == "file"
        assert canonicalize("\ufb01le", strategy(normalize_unicode=False)) == "\ufb01le"

    def test_encoding_normalization(self):
        assert canonicalize("\ufeffabc\r\ndef", strategy()) == "abc def"

    def test_stopwords(self):
        assert canonicalize("The cat is on the mat", strategy(ignore_stopwords=True)) == "cat mat"

    def test_empty(self):
        assert canonicalize("", strategy()) == ""


class TestSplitUnits:
    """Test splitting granularity and min_length."""

    def test_words_with_min_length(self):
        assert split_units("a bb ccc", strategy(split_strategy="Words", min_length=2)) == ["bb", "ccc"]

    def test_sentences(self):
        units = split_units("One. Two! Three?", strategy(split_strategy="Sentences"))
        assert units == ["one.", "two!", "three?"]

    def test_paragraphs(self):
        units = split_units("first line\nsame paragraph\n\nsecond", strategy(split_strategy="Paragraphs"))
        assert units == ["first line same paragraph", "second"]

    def test_whole_text(self):
        assert split_units("Some Text", strategy(split_strategy="WholeText")) == "some text"

    def test_whole_text_below_min_length(self):
        assert split_units("abc", strategy(split_strategy="WholeText", min_length=5)) == ""

    def test_characters(self):
        assert split_units("Ab c", strategy(split_strategy="Characters")) == ["a", "b", " ", "c"]

    def test_characters_min_length_counts_whole_text(self):
        assert split_units("abc", strategy(split_strategy="Characters", min_length=3)) == ["a", "b", "c"]
        assert split_units("abc", strategy(split_strategy="Characters", min_length=4)) == []


class TestSoundex:
    """Test phonetic codes."""

    @pytest.mark.parametrize("word,code", [
        ("Robert", "R163"),
        ("Rupert", "R163"),
        ("Ashcraft", "A261"),
        ("Tymczak", "T522"),
        ("Pfister", "P236"),
        ("Lee", "L000"),
        ("", "0000"),
    ])
    def test_codes(self, word, code):
        assert soundex(word) == code


class TestScorePair:
    """Test per-method similarity scores."""

    def test_exact(self):
        s = strategy()
        assert score_pair("abc", "abc", s) == 1.0
        assert score_pair("abc", "abd", s) == 0.0

    def test_levenshtein(self):
        s = strategy(similarity_method="Levenshtein")
        assert score_pair("kitten", "sitting", s) == pytest.approx(1 - 3 / 7)

    def test_jaro_winkler(self):
        s = strategy(similarity_method={"kind": "Fuzzy", "algorithm": "JaroWinkler"})
        assert score_pair("martha", "marhta", s) == pytest.approx(0.9611, abs=1e-3)

    def test_damerau_counts_transposition_once(self):
        s = strategy(similarity_method={"kind": "Fuzzy", "algorithm": "DamerauLevenshtein"})
        assert score_pair("abcd", "abdc", s) == pytest.approx(0.75)

    def test_soundex(self):
        s = strategy(similarity_method={"kind": "Fuzzy", "algorithm": "Soundex"})
        assert score_pair(["robert", "smith"], ["rupert", "smyth"], s) == 1.0

    def test_ngram(self):
        s = strategy(similarity_method={"kind": "Fuzzy", "algorithm": "NGram"}, ngram_size=2)
        assert score_pair("abcd", "abce", s) == pytest.approx(0.5)

    def test_empty_units(self):
        assert score_pair("", "abc", strategy()) == 0.0

    def test_semantic_not_supported(self):
        with pytest.raises(ValueError):
            score_pair("a", "b", strategy(similarity_method="Semantic"))


class TestCompare:
    """Test comparison scope and aggregation."""

    def test_local_scope_mean(self):
        s = strategy(split_strategy="Sentences", comparison_scope="Local")
        assert compare(["a.", "b."], ["a.", "c."], s) == pytest.approx(0.5)

    def test_local_scope_max(self):
        s = strategy(split_strategy="Sentences", comparison_scope="Local", similarity_aggregation="Max")
        assert compare(["a.", "b."], ["a.", "c."], s) == 1.0

    def test_local_scope_missing_counterpart(self):
        s = strategy(split_strategy="Sentences", comparison_scope="Local")
        assert compare(["a."], ["a.", "b."], s) == pytest.approx(0.5)

    def test_global_scope(self):
        s = strategy(split_strategy="Sentences")
        assert compare(["a.", "b."], ["a.", "c."], s) == 0.0

    def test_characters_local_scope(self):
        s = strategy(split_strategy="Characters", comparison_scope="Local")
        assert compare(list("abcd"), list("abce"), s) == pytest.approx(0.75)

    def test_characters_global_scope_scores_joined_text(self):
        s = strategy(split_strategy="Characters", similarity_method={"kind": "Fuzzy", "algorithm": "NGram"},
                     ngram_size=2)
        assert compare(list("abcd"), list("abce"), s) == pytest.approx(0.5)
