"""Deduplication session controller.

The controller owns the active strategy, the corpus and the latest result,
and sequences every engine call through one FIFO ``asyncio.Lock`` held for a
whole state transition. Consequences:

- a submission or detection issued while a strategy sync is in flight
  queues behind it and observes the new strategy;
- strategy syncs reach the engine in the order they were issued;
- a strategy that needs warm-up is settled (completion signal, or a bounded
  readiness poll) before the lock is released.

``clear`` acts immediately: it starts a new corpus generation and resets
the result without waiting for the lock. Work issued before the clear is
dropped when it reaches the lock, and detection responses are discarded if
their snapshot generation no longer matches the store.

No public operation raises. Failures move the session to ``FAILED`` with
the error retained on ``status``; the previous strategy, corpus and result
stay in place.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Mapping, Optional, Union

from textdedup.config import Config, get_config
from textdedup.engine.base import DedupEngine
from textdedup.errors import ConfigError, DedupError, EngineError, ErrorCode, NotFoundError, StaleGenerationError
from textdedup.results import DuplicateResult
from textdedup.session.assembler import assemble
from textdedup.session.corpus import CorpusSnapshot, CorpusStore
from textdedup.session.status import SessionState, SessionStatus, SubmissionMode
from textdedup.strategy.models import DedupStrategy, validate_strategy
from textdedup.strategy.presets import PresetCatalog, get_catalog
from textdedup.utils.logger import log_debug, log_error, log_info, log_transition, log_warning, preview

StatusListener = Callable[[SessionStatus], None]
StrategyCandidate = Union[DedupStrategy, Mapping[str, Any]]


class SessionController:
    """Single-session state machine between a caller and a comparison engine.

    Args:
        engine: The comparison engine. One instance per session.
        catalog: Preset catalog (defaults to the process-wide catalog).
        config: Settings (defaults to ``get_config()``).
        submission_mode: ``accumulate`` or ``reset`` (defaults to config).
        initial_strategy: Active strategy before ``start``; defaults to the
            configured default preset.

    The controller is bound to the event loop it is used from.
    """

    def __init__(
        self,
        engine: DedupEngine,
        *,
        catalog: Optional[PresetCatalog] = None,
        config: Optional[Config] = None,
        submission_mode: Union[SubmissionMode, str, None] = None,
        initial_strategy: Optional[DedupStrategy] = None,
    ):
        self.config = config or get_config()
        self._engine = engine
        self._catalog = catalog or get_catalog()
        self._submission_mode = SubmissionMode(submission_mode or self.config.submission_mode)

        if initial_strategy is not None:
            self._strategy = validate_strategy(initial_strategy)
        else:
            self._strategy = self._catalog.get(self.config.default_preset).settings

        self._corpus = CorpusStore()
        self._result = DuplicateResult.empty()
        self._status = SessionStatus(SessionState.IDLE, self._corpus.generation)
        self._lock = asyncio.Lock()
        self._listeners: List[StatusListener] = []

        # Incremented by every explicit clear(); work issued under an older
        # epoch is dropped.
        self._epoch = 0
        # The engine may hold a strategy other than the active one until the
        # first sync, and again after a failed one; apply before detecting.
        self._needs_resync = True
        # The engine-side corpus may still hold texts after a failed clear.
        self._needs_engine_clear = False

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def current_strategy(self) -> DedupStrategy:
        return self._strategy

    @property
    def current_result(self) -> DuplicateResult:
        return self._result

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def corpus(self) -> CorpusSnapshot:
        return self._corpus.snapshot()

    @property
    def submission_mode(self) -> SubmissionMode:
        return self._submission_mode

    @property
    def catalog(self) -> PresetCatalog:
        return self._catalog

    def add_listener(self, listener: StatusListener) -> None:
        """Call ``listener`` with the new ``SessionStatus`` on every transition."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Strategy operations
    # ------------------------------------------------------------------

    async def start(self) -> Optional[DedupStrategy]:
        """Adopt the engine's saved strategy, or apply the default preset."""
        saved = await self.load_saved_strategy()
        if saved is not None:
            return saved
        log_warning("Could not load saved strategy; applying default preset",
                    preset=self.config.default_preset)
        return await self.apply_preset(self.config.default_preset)

    async def set_strategy(self, candidate: StrategyCandidate) -> Optional[DedupStrategy]:
        """Validate, apply and (if needed) settle a new strategy.

        Returns:
            The strategy the engine resolved, or ``None`` on failure.
        """
        try:
            strategy = validate_strategy(candidate)
        except ConfigError as e:
            async with self._lock:
                self._fail(e, "set_strategy")
            return None

        async with self._lock:
            try:
                resolved = await self._sync_locked(strategy)
            except Exception as e:
                self._fail(e, "set_strategy")
                return None
            self._set_state(SessionState.IDLE)
            return resolved

    async def update_strategy(self, **changes: Any) -> Optional[DedupStrategy]:
        """Apply field changes on top of the active strategy."""
        candidate = self._strategy.model_dump()
        candidate.update(changes)
        return await self.set_strategy(candidate)

    async def apply_preset(self, name: str) -> Optional[DedupStrategy]:
        """Apply a preset from the catalog by name."""
        try:
            preset = self._catalog.get(name)
        except NotFoundError as e:
            async with self._lock:
                self._fail(e, "apply_preset")
            return None
        log_info("Applying preset", preset=preset.name)
        return await self.set_strategy(preset.settings)

    async def load_saved_strategy(self) -> Optional[DedupStrategy]:
        """Adopt the strategy currently applied on the engine."""
        async with self._lock:
            self._set_state(SessionState.SYNCING_STRATEGY)
            try:
                saved = await self._engine_call("get_strategy", self._engine.get_strategy)
                saved = self._validate_engine_strategy(saved, "get_strategy")
                await self._settle(saved)
            except Exception as e:
                self._fail(e, "load_saved_strategy")
                return None

            self._strategy = saved
            self._needs_resync = False
            log_info("Loaded saved strategy", method=saved.similarity_method.label,
                     threshold=saved.similarity_threshold)
            self._set_state(SessionState.IDLE)
            return saved

    # ------------------------------------------------------------------
    # Corpus operations
    # ------------------------------------------------------------------

    async def submit_text(self, text: str) -> Optional[DuplicateResult]:
        """Add ``text`` to the corpus and run detection.

        Returns:
            The new result, or ``None`` if the submission failed or was
            discarded by a ``clear``.
        """
        epoch = self._epoch
        async with self._lock:
            if not isinstance(text, str):
                self._fail(ConfigError(f"Submitted text must be a string, got {type(text).__name__}"),
                           "submit_text")
                return None
            try:
                self._ensure_current(epoch)
                await self._prepare_engine_locked(epoch)

                self._set_state(SessionState.SUBMITTING_TEXT)
                if self._submission_mode is SubmissionMode.RESET:
                    await self._engine_call("clear", self._engine.clear)
                    self._ensure_current(epoch)
                    self._corpus.clear()

                expected = self._corpus.next_index
                index = await self._engine_call("add_text", self._engine.add_text, text)
                self._ensure_current(epoch)
                if index != expected:
                    raise EngineError(
                        f"Engine assigned index {index} but the corpus expected {expected}; "
                        f"clear the session to resynchronize",
                        operation="add_text", code=ErrorCode.INTERNAL_ERROR,
                    )
                self._corpus.append(text)
                log_debug("Text submitted", index=index, generation=self._corpus.generation,
                          text=preview(text))

                return await self._detect_locked()
            except StaleGenerationError as e:
                log_debug("Discarded submission from a cleared generation", issued=e.issued, current=e.current)
                self._return_to_idle()
                return None
            except Exception as e:
                self._fail_unless_cleared(e, "submit_text", epoch)
                return None

    async def detect(self) -> Optional[DuplicateResult]:
        """Re-run detection over the current corpus, e.g. after a strategy change."""
        epoch = self._epoch
        async with self._lock:
            try:
                self._ensure_current(epoch)
                await self._prepare_engine_locked(epoch)
                return await self._detect_locked()
            except StaleGenerationError as e:
                log_debug("Discarded detection from a cleared generation", issued=e.issued, current=e.current)
                self._return_to_idle()
                return None
            except Exception as e:
                self._fail_unless_cleared(e, "detect", epoch)
                return None

    async def clear(self) -> bool:
        """Wipe the corpus and result, and cancel outstanding work.

        The local reset happens immediately; the engine-side clear runs in
        order with other engine calls.

        Returns:
            ``True`` if the engine-side corpus was cleared too.
        """
        self._epoch += 1
        generation = self._corpus.clear()
        self._result = DuplicateResult.empty()
        self._needs_engine_clear = True
        if self._lock.locked() and self._status.state is SessionState.SYNCING_STRATEGY:
            # A running sync is not cancelled by clear; it reports IDLE itself.
            self._set_state(SessionState.SYNCING_STRATEGY)
        else:
            self._set_state(SessionState.IDLE)
        log_info("Session cleared", generation=generation)

        async with self._lock:
            try:
                await self._engine_call("clear", self._engine.clear)
            except Exception as e:
                self._fail(e, "clear")
                return False
            self._needs_engine_clear = False
            return True

    async def aclose(self) -> None:
        await self._engine.aclose()

    # ------------------------------------------------------------------
    # Internals (callers hold self._lock)
    # ------------------------------------------------------------------

    async def _sync_locked(self, strategy: DedupStrategy) -> DedupStrategy:
        self._set_state(SessionState.SYNCING_STRATEGY)
        applied = False
        try:
            resolved = await self._engine_call("update_strategy", self._engine.update_strategy, strategy)
            resolved = self._validate_engine_strategy(resolved, "update_strategy")
            await self._settle(resolved)
            applied = True
        finally:
            if not applied:
                self._needs_resync = True

        self._strategy = resolved
        self._needs_resync = False
        log_info("Strategy applied", method=resolved.similarity_method.label,
                 threshold=resolved.similarity_threshold,
                 split_strategy=resolved.split_strategy.value)
        return resolved

    async def _settle(self, strategy: DedupStrategy) -> None:
        """Wait until the engine can answer detection requests for ``strategy``.

        Raises:
            EngineError: If the engine does not become ready in time.
        """
        if not strategy.requires_settle:
            return

        if self._engine.supports_ready_signal:
            timeout = self.config.settle_timeout_seconds
            try:
                await asyncio.wait_for(
                    self._engine_call("wait_until_ready", self._engine.wait_until_ready),
                    timeout=timeout,
                )
            except asyncio.TimeoutError as e:
                raise EngineError(f"Engine did not signal readiness within {timeout}s",
                                  operation="settle") from e
            log_debug("Engine signalled readiness", method=strategy.similarity_method.label)
            return

        attempts = self.config.settle_max_attempts
        interval = self.config.settle_poll_interval_seconds
        for attempt in range(1, attempts + 1):
            if await self._engine_call("is_ready", self._engine.is_ready):
                log_debug("Engine reported ready", attempt=attempt)
                return
            if attempt < attempts:
                await asyncio.sleep(interval)
        raise EngineError(f"Engine not ready after {attempts} readiness checks", operation="settle")

    async def _prepare_engine_locked(self, epoch: int) -> None:
        if self._needs_engine_clear:
            await self._engine_call("clear", self._engine.clear)
            self._needs_engine_clear = False
            self._ensure_current(epoch)
        if self._needs_resync:
            log_info("Applying active strategy before detection",
                     method=self._strategy.similarity_method.label)
            await self._sync_locked(self._strategy)
            self._ensure_current(epoch)

    async def _detect_locked(self) -> DuplicateResult:
        snapshot = self._corpus.snapshot()
        threshold = self._strategy.similarity_threshold
        self._set_state(SessionState.AWAITING_DETECTION)

        raw_groups = await self._engine_call("find_duplicates", self._engine.find_duplicates)
        if snapshot.generation != self._corpus.generation:
            raise StaleGenerationError(snapshot.generation, self._corpus.generation)

        result = assemble(raw_groups, snapshot, threshold)
        self._result = result
        log_info("Duplicates detected", groups=result.stats.duplicate_groups,
                 total_items=result.stats.total_items, unique_items=result.stats.unique_items)
        self._set_state(SessionState.READY)
        return result

    def _ensure_current(self, epoch: int) -> None:
        if epoch != self._epoch:
            raise StaleGenerationError(epoch, self._epoch)

    async def _engine_call(self, operation: str, call: Callable, *args: Any) -> Any:
        try:
            return await call(*args)
        except DedupError:
            raise
        except Exception as e:
            raise EngineError(f"Engine {operation} failed: {e}", operation=operation) from e

    @staticmethod
    def _validate_engine_strategy(strategy: Any, operation: str) -> DedupStrategy:
        try:
            return validate_strategy(strategy)
        except ConfigError as e:
            raise EngineError(f"Engine {operation} returned an invalid strategy: {e.message}",
                              operation=operation, code=ErrorCode.DESERIALIZATION_ERROR) from e

    def _fail_unless_cleared(self, error: Exception, operation: str, epoch: int) -> None:
        if epoch != self._epoch:
            log_debug("Discarded failure from a cleared generation", operation=operation, error=str(error))
            self._return_to_idle()
            return
        self._fail(error, operation)

    def _return_to_idle(self) -> None:
        if self._status.state is not SessionState.IDLE:
            self._set_state(SessionState.IDLE)

    def _fail(self, error: Exception, operation: str) -> None:
        if not isinstance(error, DedupError):
            error = EngineError(str(error) or type(error).__name__, operation=operation,
                                code=ErrorCode.INTERNAL_ERROR)
        log_error("Session operation failed", operation=operation,
                  code=error.code.value, error=error.message)
        self._set_state(SessionState.FAILED, error)

    def _set_state(self, state: SessionState, error: Optional[DedupError] = None) -> None:
        previous = self._status.state
        self._status = SessionStatus(state, self._corpus.generation, error)
        log_transition(previous.value, state.value, generation=self._status.generation)
        for listener in list(self._listeners):
            try:
                listener(self._status)
            except Exception as e:
                log_error("Status listener failed", listener=repr(listener), error=str(e))
