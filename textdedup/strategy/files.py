"""Strategy files: load a strategy (or a preset reference) from YAML or JSON.

A strategy file is either a full strategy mapping, or a preset reference
with optional overrides::

    preset: Near Match
    overrides:
      similarity_threshold: 0.85
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from textdedup.errors import ConfigError
from textdedup.strategy.models import DedupStrategy, validate_strategy
from textdedup.strategy.presets import get_catalog
from textdedup.utils.logger import log_info


def load_strategy_file(path: Union[str, Path]) -> DedupStrategy:
    """Load and validate a strategy from a YAML or JSON file.

    Args:
        path: File to read. JSON is a subset of YAML, so both parse.

    Returns:
        The validated strategy.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the content is not a valid strategy
        NotFoundError: If it references an unknown preset
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Strategy file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse strategy file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Strategy file {path} must contain a mapping")

    strategy = strategy_from_mapping(data)
    log_info("Loaded strategy file", path=str(path), method=strategy.similarity_method.label)
    return strategy


def strategy_from_mapping(data: Dict[str, Any]) -> DedupStrategy:
    """Resolve a preset reference with overrides, or validate a plain strategy mapping."""
    if "preset" in data:
        extra = set(data) - {"preset", "overrides"}
        if extra:
            raise ConfigError(f"Unexpected keys next to 'preset': {sorted(extra)}")
        preset = get_catalog().get(data["preset"])
        overrides = data.get("overrides") or {}
        if not isinstance(overrides, dict):
            raise ConfigError("'overrides' must be a mapping")
        return preset.settings.with_changes(**overrides)
    return validate_strategy(data)


def save_strategy_file(strategy: DedupStrategy, path: Union[str, Path]) -> None:
    """Write a strategy as YAML in wire shape."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(strategy.to_wire(), f, sort_keys=False, allow_unicode=True)
