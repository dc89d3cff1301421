"""Session states and the observable status value."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from textdedup.errors import DedupError


class SessionState(Enum):
    """Session controller states."""

    IDLE = "idle"
    SYNCING_STRATEGY = "syncing_strategy"
    SUBMITTING_TEXT = "submitting_text"
    AWAITING_DETECTION = "awaiting_detection"
    READY = "ready"  # holds a fresh result
    FAILED = "failed"  # holds the error; recoverable by retrying


class SubmissionMode(Enum):
    """Whether the corpus accumulates across submissions or resets on each one."""

    ACCUMULATE = "accumulate"
    RESET = "reset"


@dataclass(frozen=True)
class SessionStatus:
    """Snapshot of the state machine, published to listeners on every change."""

    state: SessionState
    generation: int
    error: Optional[DedupError] = None

    @property
    def failed(self) -> bool:
        return self.state is SessionState.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "generation": self.generation,
            "error": self.error.to_dict() if self.error else None,
        }
