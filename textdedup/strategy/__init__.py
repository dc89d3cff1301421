"""Strategy model, preset catalog and strategy files."""

from .models import (
    ComparisonScope,
    DedupStrategy,
    FuzzyAlgorithm,
    SimilarityAggregation,
    SimilarityWeights,
    SplitStrategy,
    WeightingStrategy,
    validate_strategy,
    validate_weights,
)
from .presets import Preset, PresetCatalog, get_catalog
from .files import load_strategy_file, save_strategy_file

__all__ = [
    "ComparisonScope",
    "DedupStrategy",
    "FuzzyAlgorithm",
    "Preset",
    "PresetCatalog",
    "SimilarityAggregation",
    "SimilarityWeights",
    "SplitStrategy",
    "WeightingStrategy",
    "get_catalog",
    "load_strategy_file",
    "save_strategy_file",
    "validate_strategy",
    "validate_weights",
]
