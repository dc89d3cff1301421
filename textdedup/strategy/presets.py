"""Read-only catalog of named strategy templates.

The catalog is built once per process. Every entry is validated while it is
built, so a broken preset fails at startup instead of when a user picks it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from textdedup.errors import ConfigError, NotFoundError
from textdedup.strategy.models import DedupStrategy, validate_strategy
from textdedup.utils.logger import log_debug


@dataclass(frozen=True)
class Preset:
    """A named, pre-validated strategy template."""

    name: str
    description: str
    settings: DedupStrategy


# Ordered as presented to users: cheapest, strictest comparison first.
_PRESET_DEFINITIONS: Tuple[Dict[str, Any], ...] = (
    {
        "name": "Exact Match",
        "description": "Find identical text, including spacing and punctuation",
        "settings": {
            "similarity_method": {"kind": "Exact"},
            "similarity_threshold": 0.95,
            "case_sensitive": False,
            "ignore_whitespace": True,
            "ignore_punctuation": False,
            "normalize_unicode": False,
            "split_strategy": "Words",
            "comparison_scope": "Global",
            "min_length": 10,
            "use_parallel": True,
            "ignore_stopwords": False,
            "stemming": False,
            "ngram_size": 3,
            "language_detection": False,
            "encoding_normalization": True,
            "similarity_weighting": {"frequency": 0.4, "position": 0.4, "context": 0.2, "strategy": "Linear"},
            "adaptive_thresholding": False,
        },
    },
    {
        "name": "Near Match",
        "description": "Find text with minor formatting differences",
        "settings": {
            "similarity_method": {"kind": "Levenshtein"},
            "similarity_threshold": 0.8,
            "case_sensitive": False,
            "ignore_whitespace": True,
            "ignore_punctuation": True,
            "normalize_unicode": True,
            "split_strategy": "Words",
            "comparison_scope": "Global",
            "min_length": 10,
            "use_parallel": True,
            "ignore_stopwords": True,
            "stemming": False,
            "ngram_size": 3,
            "language_detection": False,
            "encoding_normalization": True,
            "similarity_weighting": {"frequency": 0.5, "position": 0.3, "context": 0.2, "strategy": "Linear"},
            "adaptive_thresholding": True,
        },
    },
    {
        "name": "Fuzzy Match",
        "description": "Find text with typos and small variations",
        "settings": {
            "similarity_method": {"kind": "Levenshtein"},
            "similarity_threshold": 0.7,
            "case_sensitive": False,
            "ignore_whitespace": True,
            "ignore_punctuation": True,
            "normalize_unicode": True,
            "split_strategy": "Sentences",
            "comparison_scope": "Global",
            "min_length": 5,
            "use_parallel": True,
            "ignore_stopwords": True,
            "stemming": True,
            "ngram_size": 2,
            "language_detection": True,
            "encoding_normalization": True,
            "similarity_weighting": {"frequency": 0.6, "position": 0.2, "context": 0.2, "strategy": "Quadratic"},
            "adaptive_thresholding": True,
        },
    },
    {
        "name": "Typo Tolerant",
        "description": "Match short passages that differ by transpositions and typos",
        "settings": {
            "similarity_method": {"kind": "Fuzzy", "algorithm": "JaroWinkler"},
            "similarity_threshold": 0.9,
            "case_sensitive": False,
            "ignore_whitespace": True,
            "ignore_punctuation": True,
            "normalize_unicode": True,
            "split_strategy": "WholeText",
            "comparison_scope": "Global",
            "min_length": 3,
            "use_parallel": True,
            "ignore_stopwords": False,
            "stemming": False,
            "ngram_size": 3,
            "language_detection": False,
            "encoding_normalization": True,
            "similarity_weighting": {"frequency": 0.4, "position": 0.4, "context": 0.2, "strategy": "Linear"},
            "adaptive_thresholding": False,
        },
    },
    {
        "name": "Similar Ideas",
        "description": "Find text expressing similar concepts",
        "settings": {
            "similarity_method": {"kind": "Semantic"},
            "similarity_aggregation": "Mean",
            "similarity_threshold": 0.6,
            "case_sensitive": False,
            "ignore_whitespace": True,
            "ignore_punctuation": True,
            "normalize_unicode": True,
            "split_strategy": "Paragraphs",
            "comparison_scope": "Global",
            "min_length": 20,
            "use_parallel": True,
            "ignore_stopwords": True,
            "stemming": True,
            "ngram_size": 3,
            "language_detection": True,
            "encoding_normalization": True,
            "similarity_weighting": {"frequency": 0.3, "position": 0.3, "context": 0.4, "strategy": "WeightedMean"},
            "adaptive_thresholding": True,
        },
    },
    {
        "name": "Strict Large Blocks",
        "description": "Looks for large duplicated character sequences (useful for code or logs)",
        "settings": {
            "similarity_method": {"kind": "Exact"},
            "similarity_threshold": 0.9,
            "case_sensitive": True,
            "ignore_whitespace": False,
            "ignore_punctuation": False,
            "normalize_unicode": False,
            "split_strategy": "Characters",
            "comparison_scope": "Global",
            "min_length": 50,
            "use_parallel": True,
            "ignore_stopwords": False,
            "stemming": False,
            "ngram_size": 5,
            "language_detection": False,
            "encoding_normalization": False,
            "similarity_weighting": {"frequency": 0.8, "position": 0.1, "context": 0.1, "strategy": "Linear"},
            "adaptive_thresholding": False,
        },
    },
)


class PresetCatalog:
    """Immutable, ordered collection of presets looked up by name."""

    def __init__(self, presets: Tuple[Preset, ...]):
        names = [p.name for p in presets]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate preset names in catalog: {names}")
        self._presets = tuple(presets)
        self._by_name = {p.name: p for p in self._presets}

    @classmethod
    def from_definitions(cls, definitions) -> "PresetCatalog":
        """Build a catalog, validating every entry.

        Raises:
            RuntimeError: If any definition fails validation. This is a
                programming error in the definitions, not a user error.
        """
        presets = []
        for definition in definitions:
            try:
                settings = validate_strategy(definition["settings"])
            except ConfigError as e:
                raise RuntimeError(f"Preset {definition.get('name')!r} is invalid: {e.message}") from e
            presets.append(Preset(definition["name"], definition["description"], settings))
        log_debug("Preset catalog built", presets=[p.name for p in presets])
        return cls(tuple(presets))

    def list(self) -> List[Preset]:
        return list(self._presets)

    def names(self) -> List[str]:
        return [p.name for p in self._presets]

    def get(self, name: str) -> Preset:
        """Look up a preset by exact name.

        Raises:
            NotFoundError: If no preset has that name.
        """
        preset = self._by_name.get(name)
        if preset is None:
            raise NotFoundError(name, self.names())
        return preset

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._presets)


_catalog: Optional[PresetCatalog] = None


def get_catalog() -> PresetCatalog:
    """Get the process-wide preset catalog, building it on first use."""
    global _catalog
    if _catalog is None:
        _catalog = PresetCatalog.from_definitions(_PRESET_DEFINITIONS)
    return _catalog
