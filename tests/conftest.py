"""Pytest configuration and fixtures for textdedup tests."""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from textdedup.config import Config
from textdedup.engine.base import DedupEngine, RawGroups
from textdedup.session.controller import SessionController
from textdedup.strategy.models import DedupStrategy


def exact_groups(texts: List[str], strategy: DedupStrategy) -> RawGroups:
    """Group indices of byte-identical texts, first occurrence first."""
    buckets: Dict[str, List[int]] = {}
    for index, text in enumerate(texts):
        buckets.setdefault(text, []).append(index)
    return [indices for indices in buckets.values() if len(indices) > 1]


class FakeEngine(DedupEngine):
    """Scriptable in-memory engine.

    Every call is recorded in ``calls``. ``delays`` maps an operation name to
    seconds slept before it completes; ``failures`` maps an operation name to
    an exception raised after the delay.
    """

    def __init__(
        self,
        grouper: Callable[[List[str], DedupStrategy], RawGroups] = exact_groups,
        delays: Optional[Dict[str, float]] = None,
        ready_signal: bool = False,
        ready_after_polls: int = 0,
    ):
        self.strategy = DedupStrategy()
        self.texts: List[str] = []
        self.calls: List[Tuple[str, Any]] = []
        self.detections: List[DedupStrategy] = []
        self.grouper = grouper
        self.delays = dict(delays or {})
        self.failures: Dict[str, Exception] = {}
        self.supports_ready_signal = ready_signal
        self.ready_event = asyncio.Event()
        self.ready_after_polls = ready_after_polls
        self.polls = 0
        self.index_offset = 0
        self.closed = False

    @property
    def operations(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def _step(self, operation: str, payload: Any = None) -> None:
        self.calls.append((operation, payload))
        delay = self.delays.get(operation)
        if delay:
            await asyncio.sleep(delay)
        error = self.failures.get(operation)
        if error is not None:
            raise error

    async def update_strategy(self, strategy: DedupStrategy) -> DedupStrategy:
        await self._step("update_strategy", strategy)
        self.strategy = strategy
        self.polls = 0
        return strategy

    async def get_strategy(self) -> DedupStrategy:
        await self._step("get_strategy")
        return self.strategy

    async def add_text(self, text: str) -> int:
        await self._step("add_text", text)
        self.texts.append(text)
        return len(self.texts) - 1 + self.index_offset

    async def clear(self) -> None:
        await self._step("clear")
        self.texts = []

    async def find_duplicates(self) -> RawGroups:
        strategy, texts = self.strategy, list(self.texts)
        self.detections.append(strategy)
        await self._step("find_duplicates")
        return self.grouper(texts, strategy)

    async def wait_until_ready(self) -> None:
        await self._step("wait_until_ready")
        await self.ready_event.wait()

    async def is_ready(self) -> bool:
        await self._step("is_ready")
        self.polls += 1
        return self.polls > self.ready_after_polls

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fast_config():
    """Configuration with short settle timings and no .env lookup."""
    return Config(
        _env_file=None,
        settle_timeout_seconds=0.2,
        settle_poll_interval_seconds=0.01,
        settle_max_attempts=5,
    )


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def controller(fake_engine, fast_config):
    return SessionController(fake_engine, config=fast_config)


@pytest.fixture
def whole_text_exact():
    """Exact comparison over whole texts with punctuation ignored."""
    return DedupStrategy(
        similarity_method="Exact",
        similarity_threshold=0.95,
        split_strategy="WholeText",
        ignore_punctuation=True,
        min_length=0,
    )
