"""Error taxonomy for the deduplication session.

Every failure the controller can observe is a ``DedupError`` carrying a short
machine-readable code, so callers can inspect a retained error without
string matching.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Stable error codes."""

    SERIALIZATION_ERROR = "E001"
    DESERIALIZATION_ERROR = "E002"
    STRATEGY_UPDATE_ERROR = "E003"
    INVALID_INPUT = "E004"
    INTERNAL_ERROR = "E005"
    NOT_FOUND = "E006"
    STALE_GENERATION = "E007"


class DedupError(Exception):
    """Base class for all deduplication errors."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "type": type(self).__name__, "message": self.message}


class ConfigError(DedupError):
    """A strategy failed local validation; the engine was never contacted."""

    default_code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        self.issues = list(issues or [])
        super().__init__(message)


class EngineError(DedupError):
    """The comparison engine failed or returned something unusable."""

    default_code = ErrorCode.STRATEGY_UPDATE_ERROR

    def __init__(self, message: str, operation: Optional[str] = None, code: Optional[ErrorCode] = None):
        self.operation = operation
        super().__init__(message, code)


class StaleGenerationError(DedupError):
    """A response arrived for a corpus generation that no longer exists.

    Internal only: the controller discards the response and never surfaces
    this error to its caller.
    """

    default_code = ErrorCode.STALE_GENERATION

    def __init__(self, issued: int, current: int):
        self.issued = issued
        self.current = current
        super().__init__(f"Response for generation {issued} discarded; current generation is {current}")


class NotFoundError(DedupError):
    """A preset name is not in the catalog."""

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.name = name
        self.available = list(available or [])
        message = f"Preset not found: {name!r}"
        if self.available:
            message += f". Available presets: {', '.join(self.available)}"
        super().__init__(message)
