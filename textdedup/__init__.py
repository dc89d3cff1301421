"""textdedup: interactive near-duplicate text detection.

A ``SessionController`` sequences strategy changes, text submissions and
detection requests against a stateful comparison engine.
"""

from textdedup.errors import ConfigError, DedupError, EngineError, ErrorCode, NotFoundError
from textdedup.results import DuplicateGroup, DuplicateResult, DuplicateStats
from textdedup.session.controller import SessionController
from textdedup.session.status import SessionState, SessionStatus, SubmissionMode
from textdedup.strategy.models import DedupStrategy, validate_strategy
from textdedup.strategy.presets import Preset, get_catalog

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DedupError",
    "DedupStrategy",
    "DuplicateGroup",
    "DuplicateResult",
    "DuplicateStats",
    "EngineError",
    "ErrorCode",
    "NotFoundError",
    "Preset",
    "SessionController",
    "SessionState",
    "SessionStatus",
    "SubmissionMode",
    "get_catalog",
    "validate_strategy",
]
