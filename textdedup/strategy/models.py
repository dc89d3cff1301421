"""Strategy model: the validated configuration describing how text is compared.

A ``DedupStrategy`` is an immutable value. Changing a strategy means building
a new one (``with_changes``) and handing it to the session controller, which
validates it again before it ever reaches the engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, ClassVar, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from textdedup.errors import ConfigError

WEIGHT_SUM_TOLERANCE = 1e-3


class SplitStrategy(str, Enum):
    """Granularity at which texts are split before comparison."""

    CHARACTERS = "Characters"
    WORDS = "Words"
    SENTENCES = "Sentences"
    PARAGRAPHS = "Paragraphs"
    WHOLE_TEXT = "WholeText"


class ComparisonScope(str, Enum):
    """Whether units are compared within one splitting unit or across all units."""

    LOCAL = "Local"
    GLOBAL = "Global"


class FuzzyAlgorithm(str, Enum):
    DAMERAU_LEVENSHTEIN = "DamerauLevenshtein"  # Levenshtein plus transpositions
    JARO_WINKLER = "JaroWinkler"  # prefix-weighted, good for short strings
    SOUNDEX = "Soundex"  # phonetic
    NGRAM = "NGram"


class WeightingStrategy(str, Enum):
    LINEAR = "Linear"
    QUADRATIC = "Quadratic"
    EXPONENTIAL = "Exponential"
    LOGARITHMIC = "Logarithmic"
    WEIGHTED_MEAN = "WeightedMean"


class SimilarityAggregation(str, Enum):
    """How several unit-level scores collapse into one."""

    FIRST = "First"
    MEAN = "Mean"
    MAX = "Max"
    MIN = "Min"


# ---------------------------------------------------------------------------
# Similarity method (tagged variant)
# ---------------------------------------------------------------------------


class _MethodBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Engines backing this method warm up asynchronously after a strategy
    # change and must settle before answering detection requests.
    requires_settle: ClassVar[bool] = False

    @property
    def label(self) -> str:
        return self.kind


class ExactMethod(_MethodBase):
    kind: Literal["Exact"] = "Exact"


class LevenshteinMethod(_MethodBase):
    kind: Literal["Levenshtein"] = "Levenshtein"


class SemanticMethod(_MethodBase):
    kind: Literal["Semantic"] = "Semantic"

    requires_settle: ClassVar[bool] = True


class FuzzyMethod(_MethodBase):
    kind: Literal["Fuzzy"] = "Fuzzy"
    algorithm: Optional[FuzzyAlgorithm] = None

    @model_validator(mode="after")
    def _require_algorithm(self):
        if self.algorithm is None:
            raise ValueError("Fuzzy similarity method requires an algorithm")
        return self

    @property
    def label(self) -> str:
        return f"Fuzzy({self.algorithm.value})"


SimilarityMethod = Annotated[
    Union[ExactMethod, LevenshteinMethod, SemanticMethod, FuzzyMethod],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------


class SimilarityWeights(BaseModel):
    """Weights for the aspects of a similarity comparison. Must sum to 1.0."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    frequency: float = Field(0.4, ge=0.0, le=1.0, description="Weight for term frequency")
    position: float = Field(0.4, ge=0.0, le=1.0, description="Weight for term position/order")
    context: float = Field(0.2, ge=0.0, le=1.0, description="Weight for surrounding context")
    strategy: WeightingStrategy = WeightingStrategy.LINEAR

    @model_validator(mode="after")
    def _check_sum(self):
        total = self.frequency + self.position + self.context
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"Similarity weights must sum to 1.0 (got {total:.4f})")
        return self


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------


class DedupStrategy(BaseModel):
    """Full configuration governing how duplicates are detected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Canonicalization
    case_sensitive: bool = False
    ignore_whitespace: bool = True
    ignore_punctuation: bool = False
    normalize_unicode: bool = False
    encoding_normalization: bool = True

    # Granularity
    split_strategy: SplitStrategy = SplitStrategy.WORDS
    comparison_scope: ComparisonScope = ComparisonScope.GLOBAL
    min_length: int = Field(0, ge=0)

    # Scoring
    similarity_threshold: float = Field(0.95, ge=0.0, le=1.0)
    similarity_method: SimilarityMethod = Field(default_factory=ExactMethod)
    similarity_weighting: SimilarityWeights = Field(default_factory=SimilarityWeights)
    similarity_aggregation: Optional[SimilarityAggregation] = None

    # Secondary tuning
    use_parallel: bool = True
    ignore_stopwords: bool = False
    stemming: bool = False
    ngram_size: int = Field(3, gt=0)
    max_duplicate_count: Optional[int] = Field(None, ge=1)
    language_detection: bool = False
    adaptive_thresholding: bool = False

    @field_validator("similarity_method", mode="before")
    @classmethod
    def _tag_bare_method(cls, v):
        # "Exact" is shorthand for {"kind": "Exact"}
        if isinstance(v, str):
            return {"kind": v}
        return v

    @property
    def requires_settle(self) -> bool:
        return self.similarity_method.requires_settle

    def with_changes(self, **updates: Any) -> "DedupStrategy":
        """Return a new validated strategy with ``updates`` applied.

        Raises:
            ConfigError: If the resulting strategy is invalid.
        """
        data = self.model_dump()
        data.update(updates)
        return validate_strategy(data)

    def to_wire(self) -> dict:
        """JSON-compatible payload sent to the engine."""
        return self.model_dump(mode="json")


def _format_issues(error: ValidationError, label: str = "strategy") -> List[str]:
    issues = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or label
        issues.append(f"{loc}: {err.get('msg')}")
    return issues


def validate_strategy(candidate: Union[DedupStrategy, Mapping[str, Any]]) -> DedupStrategy:
    """Validate a candidate strategy.

    Args:
        candidate: A ``DedupStrategy`` or a mapping in wire shape.

    Returns:
        The validated ``DedupStrategy``.

    Raises:
        ConfigError: If any field or invariant is violated.
    """
    if isinstance(candidate, DedupStrategy):
        data = candidate.model_dump()
    elif isinstance(candidate, Mapping):
        data = dict(candidate)
    else:
        raise ConfigError(f"Strategy must be a mapping, got {type(candidate).__name__}")

    try:
        return DedupStrategy.model_validate(data)
    except ValidationError as e:
        issues = _format_issues(e)
        raise ConfigError("Invalid strategy: " + "; ".join(issues), issues=issues) from e


def validate_weights(candidate: Union[SimilarityWeights, Mapping[str, Any]]) -> SimilarityWeights:
    """Validate ``SimilarityWeights`` on their own.

    Raises:
        ConfigError: If a weight is out of range or the sum is not 1.0.
    """
    data = candidate.model_dump() if isinstance(candidate, SimilarityWeights) else dict(candidate)
    try:
        return SimilarityWeights.model_validate(data)
    except ValidationError as e:
        issues = _format_issues(e, label="similarity_weighting")
        raise ConfigError("Invalid similarity weights: " + "; ".join(issues), issues=issues) from e
