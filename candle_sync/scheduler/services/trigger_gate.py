import logging
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Optional

from candle_sync.scheduler.domain.gate_state import GateDecision, GateState
from candle_sync.scheduler.domain.signal_record import ScoreResult
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor
from candle_sync.scheduler.interfaces.scoring_adapter import ScoringAdapter
from candle_sync.scheduler.store.dedup_ledger import DedupLedger

logger = logging.getLogger(__name__)

ScoredCallback = Callable[[str, WindowDescriptor, ScoreResult], None]
FiredCallback = Callable[[str, WindowDescriptor], None]
FailureCallback = Callable[[str, WindowDescriptor, BaseException], None]


class TriggerGate:
    """
    Decides, once per clock tick, whether the live instrument gets analysed
    for the current window.

    IDLE -> ELIGIBLE when the window is closed, an instrument is live and
    the ledger has not seen the pair. ELIGIBLE -> FIRED marks the ledger
    and invokes the scoring adapter in the same call, with nothing in
    between that could let another evaluation see the pair as unprocessed.
    FIRED -> IDLE once the window reopens or the live instrument changes.

    With an executor the adapter runs off-thread: the pair is marked
    in-flight before submission, then committed on success or rolled back
    on failure. Scoring and emission failures alike are reported through
    on_failure; the gate always ends the turn FIRED.
    """

    def __init__(
        self,
        ledger: DedupLedger,
        scoring_adapter: ScoringAdapter,
        on_scored: ScoredCallback,
        on_fired: Optional[FiredCallback] = None,
        on_failure: Optional[FailureCallback] = None,
        executor: Optional[Executor] = None,
    ):
        self.ledger = ledger
        self.scoring_adapter = scoring_adapter
        self.on_scored = on_scored
        self.on_fired = on_fired
        self.on_failure = on_failure
        self.executor = executor

        self._state = GateState.IDLE
        self._fired_instrument: Optional[str] = None
        self._fired_window_id: Optional[str] = None
        self._generation = 0
        self._lock = RLock()

    @property
    def state(self) -> GateState:
        return self._state

    def reset(self, discard_pending: bool = False) -> None:
        """
        Returns the gate to IDLE. With discard_pending, calls still
        outstanding belong to an older configuration: their results are
        dropped when they settle.
        """
        with self._lock:
            self._to_idle()
            if discard_pending:
                self._generation += 1

    def evaluate(
        self,
        window: WindowDescriptor,
        live_instrument: Optional[str],
        now: Optional[datetime] = None,
    ) -> GateDecision:
        with self._lock:
            if self._state == GateState.FIRED:
                if (
                    window.is_closed
                    and live_instrument == self._fired_instrument
                    and window.id == self._fired_window_id
                ):
                    return self._decision(live_instrument, window, False, "already fired")
                self._to_idle()

            if not window.is_closed:
                return self._decision(live_instrument, window, False, "window open")
            if live_instrument is None:
                return self._decision(None, window, False, "no live instrument")
            if self.ledger.has_processed(live_instrument, window.id):
                return self._decision(live_instrument, window, False, "already processed")
            if self.executor is not None and not self.ledger.begin(live_instrument, window.id):
                return self._decision(live_instrument, window, False, "already in flight")

            self._state = GateState.ELIGIBLE
            try:
                if self.executor is None:
                    self._fire_sync(live_instrument, window, now or datetime.now(timezone.utc))
                else:
                    self._fire_async(live_instrument, window)
            finally:
                self._state = GateState.FIRED
                self._fired_instrument = live_instrument
                self._fired_window_id = window.id
            return self._decision(live_instrument, window, True, "dispatched")

    def _fire_sync(self, instrument: str, window: WindowDescriptor, now: datetime) -> None:
        # Marked before the call: a failing or re-entrant adapter must not
        # leave the pair eligible.
        self.ledger.mark_processed(instrument, window.id, at=now)
        if self.on_fired:
            self.on_fired(instrument, window)
        try:
            result = self.scoring_adapter.score(instrument, window)
            self.on_scored(instrument, window, result)
        except Exception as exc:
            self._fail(instrument, window, exc)

    def _fire_async(self, instrument: str, window: WindowDescriptor) -> None:
        # The in-flight marker is already set by evaluate.
        generation = self._generation
        if self.on_fired:
            self.on_fired(instrument, window)
        try:
            future = self.executor.submit(self.scoring_adapter.score, instrument, window)
        except RuntimeError as exc:
            self.ledger.clear_in_flight(instrument, window.id)
            self._fail(instrument, window, exc)
            return
        future.add_done_callback(lambda f: self._settle(instrument, window, generation, f))

    def _settle(
        self, instrument: str, window: WindowDescriptor, generation: int, future: Future
    ) -> None:
        with self._lock:
            stale = generation != self._generation
        exc = future.exception()
        if stale:
            self.ledger.clear_in_flight(instrument, window.id)
            logger.info("Dropping scoring result for %s in %s: gate was reset", instrument, window.id)
            return
        if exc is not None:
            self.ledger.clear_in_flight(instrument, window.id)
            self._fail(instrument, window, exc)
            return
        self.ledger.complete(instrument, window.id)
        try:
            self.on_scored(instrument, window, future.result())
        except Exception as emit_exc:
            self._fail(instrument, window, emit_exc)

    def _fail(self, instrument: str, window: WindowDescriptor, exc: BaseException) -> None:
        logger.warning("Scoring failed for %s in %s: %s", instrument, window.id, exc)
        if self.on_failure:
            self.on_failure(instrument, window, exc)

    def _to_idle(self) -> None:
        self._state = GateState.IDLE
        self._fired_instrument = None
        self._fired_window_id = None

    def _decision(
        self, instrument: Optional[str], window: WindowDescriptor, fired: bool, reason: str
    ) -> GateDecision:
        return GateDecision(
            state=self._state,
            instrument=instrument,
            window_id=window.id,
            fired=fired,
            reason=reason,
        )
