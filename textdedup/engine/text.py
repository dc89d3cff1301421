"""Text canonicalization, splitting and scoring for the in-process engine."""
from __future__ import annotations

import re
import unicodedata
from typing import List, Sequence, Union

from rapidfuzz.distance import DamerauLevenshtein, JaroWinkler, Levenshtein

from textdedup.strategy.models import (
    ComparisonScope,
    DedupStrategy,
    FuzzyAlgorithm,
    SimilarityAggregation,
    SplitStrategy,
)

_RE_WS = re.compile(r"\s+")
_RE_PUNCT = re.compile(r"[^\w\s]|_")
_RE_SENTENCE_END = re.compile(r"(?<=[.!?])\s+|(?<=[。！？।۔])")
_RE_PARAGRAPH = re.compile(r"\n[ \t]*\n+")

_STOPWORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "from", "has",
    "he", "in", "is", "it", "its", "of", "on", "or", "she", "that", "the", "their",
    "there", "they", "this", "to", "was", "were", "will", "with",
})

_SOUNDEX_TABLE = {
    **dict.fromkeys("bfpv", "1"),
    **dict.fromkeys("cgjkqsxz", "2"),
    **dict.fromkeys("dt", "3"),
    "l": "4",
    **dict.fromkeys("mn", "5"),
    "r": "6",
}

Units = Union[str, List[str]]


def canonicalize(text: str, strategy: DedupStrategy) -> str:
    """Apply the strategy's normalization rules to one piece of text."""
    if not text:
        return ""
    t = text
    if strategy.encoding_normalization:
        t = t.replace("\ufeff", "").replace("\r\n", "\n").replace("\r", "\n")
    if strategy.normalize_unicode:
        t = unicodedata.normalize("NFKC", t)
    if not strategy.case_sensitive:
        t = t.lower()
    if strategy.ignore_punctuation:
        t = _RE_PUNCT.sub("", t)
    if strategy.ignore_stopwords:
        t = " ".join(w for w in t.split() if w.lower() not in _STOPWORDS)
    if strategy.ignore_whitespace:
        t = _RE_WS.sub(" ", t).strip()
    return t


def _raw_units(text: str, split: SplitStrategy) -> List[str]:
    if split == SplitStrategy.SENTENCES:
        return _RE_SENTENCE_END.split(text)
    if split == SplitStrategy.PARAGRAPHS:
        return _RE_PARAGRAPH.split(text)
    return [text]


def split_units(text: str, strategy: DedupStrategy) -> Units:
    """Split and canonicalize ``text`` into comparison units.

    WholeText compares one string; the other strategies compare a list of
    units. Characters yields one unit per character and applies
    ``min_length`` to the whole text; elsewhere units shorter than
    ``min_length`` are dropped.
    """
    split = strategy.split_strategy
    if split == SplitStrategy.CHARACTERS:
        canonical = canonicalize(text, strategy)
        return list(canonical) if len(canonical) >= strategy.min_length else []
    if split == SplitStrategy.WORDS:
        units = canonicalize(text, strategy).split()
    else:
        units = [canonicalize(u, strategy) for u in _raw_units(text, split)]
        units = [u for u in units if u.strip()]

    units = [u for u in units if len(u) >= strategy.min_length]

    if split == SplitStrategy.WHOLE_TEXT:
        return units[0] if units else ""
    return units


def soundex(word: str) -> str:
    """Encode a word using the Soundex algorithm."""
    letters = "".join(c for c in word.lower() if c.isalpha())
    if not letters:
        return "0000"
    coded = [letters[0].upper()]
    prev = _SOUNDEX_TABLE.get(letters[0], "0")
    for ch in letters[1:]:
        code = _SOUNDEX_TABLE.get(ch, "0")
        if code != "0" and code != prev:
            coded.append(code)
            if len(coded) == 4:
                break
        if ch not in "hw":
            prev = code
    return "".join(coded).ljust(4, "0")


def _ngrams(text: str, n: int) -> set:
    if len(text) < n:
        return {text} if text else set()
    return {text[i:i + n] for i in range(len(text) - n + 1)}


def _as_text(units: Units) -> str:
    return units if isinstance(units, str) else " ".join(units)


def _as_words(units: Units) -> List[str]:
    return units.split() if isinstance(units, str) else [w for u in units for w in u.split()]


def score_pair(a: Units, b: Units, strategy: DedupStrategy) -> float:
    """Similarity in [0, 1] between two unit sequences under one method."""
    if not a or not b:
        return 0.0
    if strategy.split_strategy == SplitStrategy.CHARACTERS and not isinstance(a, str):
        a, b = "".join(a), "".join(b)

    method = strategy.similarity_method
    kind = method.kind

    if kind == "Exact":
        return 1.0 if a == b else 0.0
    if kind == "Levenshtein":
        return Levenshtein.normalized_similarity(a, b)
    if kind == "Fuzzy":
        algorithm = method.algorithm
        if algorithm == FuzzyAlgorithm.DAMERAU_LEVENSHTEIN:
            return DamerauLevenshtein.normalized_similarity(a, b)
        if algorithm == FuzzyAlgorithm.JARO_WINKLER:
            return JaroWinkler.normalized_similarity(_as_text(a), _as_text(b))
        if algorithm == FuzzyAlgorithm.SOUNDEX:
            codes_a = [soundex(w) for w in _as_words(a)]
            codes_b = [soundex(w) for w in _as_words(b)]
            return Levenshtein.normalized_similarity(codes_a, codes_b)
        if algorithm == FuzzyAlgorithm.NGRAM:
            grams_a = _ngrams(_as_text(a), strategy.ngram_size)
            grams_b = _ngrams(_as_text(b), strategy.ngram_size)
            union = grams_a | grams_b
            return len(grams_a & grams_b) / len(union) if union else 0.0

    raise ValueError(f"Similarity method {method.label} is not supported in-process")


def _aggregate(scores: Sequence[float], aggregation: SimilarityAggregation) -> float:
    if not scores:
        return 0.0
    if aggregation == SimilarityAggregation.FIRST:
        return scores[0]
    if aggregation == SimilarityAggregation.MAX:
        return max(scores)
    if aggregation == SimilarityAggregation.MIN:
        return min(scores)
    return sum(scores) / len(scores)


def compare(a: Units, b: Units, strategy: DedupStrategy) -> float:
    """Compare two split texts, honouring the comparison scope.

    Global compares the full unit sequences. Local compares units position
    by position (a missing counterpart scores 0) and aggregates the scores.
    """
    if strategy.comparison_scope == ComparisonScope.GLOBAL or isinstance(a, str):
        return score_pair(a, b, strategy)

    length = max(len(a), len(b))
    scores = [
        score_pair(a[i], b[i], strategy) if i < len(a) and i < len(b) else 0.0
        for i in range(length)
    ]
    return _aggregate(scores, strategy.similarity_aggregation or SimilarityAggregation.MEAN)
