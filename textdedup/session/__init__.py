"""Session state: corpus, result assembly and the controller."""

from .assembler import assemble
from .controller import SessionController
from .corpus import CorpusItem, CorpusSnapshot, CorpusStore
from .status import SessionState, SessionStatus, SubmissionMode

__all__ = [
    "CorpusItem",
    "CorpusSnapshot",
    "CorpusStore",
    "SessionController",
    "SessionState",
    "SessionStatus",
    "SubmissionMode",
    "assemble",
]
