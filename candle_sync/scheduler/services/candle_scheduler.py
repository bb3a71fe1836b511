import logging
import threading
from collections import deque
from concurrent.futures import Executor
from typing import Any, Callable, Deque, List, Optional

from candle_sync.core.logging.structured_runtime_logger import StructuredRuntimeLogger
from candle_sync.core.time.system_time_source import SystemTimeSource
from candle_sync.core.time.time_source import TimeSource, to_epoch_ms
from candle_sync.scheduler.domain.exceptions import ConfigurationError
from candle_sync.scheduler.domain.gate_state import GateDecision
from candle_sync.scheduler.domain.scheduler_config import (
    SchedulerConfig,
    describe_disabled_reason,
)
from candle_sync.scheduler.domain.scheduler_notice import NoticeKind, SchedulerNotice
from candle_sync.scheduler.domain.scheduler_snapshot import SchedulerSnapshot, SchedulerStatus
from candle_sync.scheduler.domain.signal_record import ScoreResult, SignalRecord
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor
from candle_sync.scheduler.interfaces.scheduler_observer import (
    CompositeSchedulerObserver,
    SchedulerObserver,
)
from candle_sync.scheduler.interfaces.scoring_adapter import ScoringAdapter
from candle_sync.scheduler.services.attention_rotator import AttentionRotator
from candle_sync.scheduler.services.periodic_timer import PeriodicTimer
from candle_sync.scheduler.services.signal_emitter import SignalEmitter
from candle_sync.scheduler.services.trigger_gate import TriggerGate
from candle_sync.scheduler.services.window_calculator import (
    DEFAULT_CLOSE_THRESHOLD_SECONDS,
    WindowCalculator,
)
from candle_sync.scheduler.store.dedup_ledger import DedupLedger, InMemoryDedupLedger
from candle_sync.scheduler.store.signal_buffer import SignalBuffer

logger = logging.getLogger(__name__)

TimerFactory = Callable[[str, float, Callable[[], None]], PeriodicTimer]


class CandleScheduler:
    """
    Owns the dedup ledger, rotation state, trigger gate and both timers.

    Clock ticks, rotations and reconfiguration all run under one lock, so
    the two timers behave like a single cooperative loop and the gate
    always sees the current live instrument. Pausing halts both timers
    and keeps ledger and rotation as they are.
    """

    def __init__(
        self,
        scoring_adapter: ScoringAdapter,
        config: Optional[SchedulerConfig] = None,
        time_source: Optional[TimeSource] = None,
        observer: Optional[SchedulerObserver] = None,
        ledger: Optional[DedupLedger] = None,
        executor: Optional[Executor] = None,
        timer_factory: TimerFactory = PeriodicTimer,
        structured_logger: Optional[StructuredRuntimeLogger] = None,
    ):
        self.config = config or SchedulerConfig()
        self.time_source = time_source or SystemTimeSource()
        self.observer = CompositeSchedulerObserver([observer] if observer else [])
        self.ledger = ledger or InMemoryDedupLedger()
        self.timer_factory = timer_factory
        self.structured_logger = structured_logger or StructuredRuntimeLogger()

        self.buffer = SignalBuffer(self.config.result_buffer_capacity)
        self.emitter = SignalEmitter(self.buffer, self.config.min_confidence)
        self.rotator = AttentionRotator(
            self.config.active_instruments, self.config.rotation_period_seconds
        )
        self.gate = TriggerGate(
            ledger=self.ledger,
            scoring_adapter=scoring_adapter,
            on_scored=self._on_scored,
            on_fired=self._on_fired,
            on_failure=self._on_failure,
            executor=executor,
        )

        self._lock = threading.RLock()
        self._running = False
        self._clock_timer: Optional[PeriodicTimer] = None
        self._rotation_timer: Optional[PeriodicTimer] = None
        self._current_window: Optional[WindowDescriptor] = None
        self._notices: Deque[SchedulerNotice] = deque(maxlen=50)
        self.calculator = self._build_calculator(self.config)

    @classmethod
    def from_settings(cls, settings, scoring_adapter: ScoringAdapter, **kwargs: Any) -> "CandleScheduler":
        config, warnings = SchedulerConfig.from_settings(settings)
        scheduler = cls(scoring_adapter, config=config, **kwargs)
        for warning in warnings:
            scheduler._notice(NoticeKind.CONFIGURATION, warning)
        return scheduler

    # Lifecycle

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        with self._lock:
            if self._running:
                return True
            reason = describe_disabled_reason(self.config)
            if reason:
                logger.warning("Scheduler not started: %s", reason)
                return False
            self._clock_timer = self.timer_factory(
                "candle-clock", self.config.tick_period_seconds, self._on_clock_timer
            )
            self._rotation_timer = self.timer_factory(
                "candle-rotation", self.config.rotation_period_seconds, self._on_rotation_timer
            )
            self._running = True
            self._clock_timer.start()
            self._rotation_timer.start()
            self.structured_logger.emit(
                "SCHEDULER_STARTED",
                window_width=self.config.window_width.value,
                instruments=list(self.config.active_instruments),
                live_instrument=self.rotator.live_instrument,
            )
            self.tick()
            return True

    def pause(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            timers = [self._clock_timer, self._rotation_timer]
            self._clock_timer = None
            self._rotation_timer = None
        # Joined outside the lock: a timer callback may be waiting on it.
        for timer in timers:
            if timer:
                timer.stop()
        self.structured_logger.emit("SCHEDULER_PAUSED")

    def stop(self) -> None:
        self.pause()

    def __enter__(self) -> "CandleScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # Ticks

    def tick(self) -> GateDecision:
        with self._lock:
            now = self.time_source.now()
            window = self.calculator.describe(to_epoch_ms(now))
            self._current_window = window
            if self.config.ledger_retention_windows > 0:
                cutoff = window.start_ms - self.config.ledger_retention_windows * window.width.milliseconds
                self.ledger.evict_before(cutoff)
            self.observer.on_window_tick(window)
            return self.gate.evaluate(window, self.rotator.live_instrument, now=now)

    def rotate(self) -> Optional[str]:
        with self._lock:
            previous = self.rotator.live_instrument
            current = self.rotator.rotate()
            if current is not None:
                self.observer.on_rotation(previous, current)
            return current

    def _on_clock_timer(self) -> None:
        with self._lock:
            if self._running:
                self.tick()

    def _on_rotation_timer(self) -> None:
        with self._lock:
            if self._running:
                self.rotate()

    # Configuration

    def reconfigure(self, **raw: Any) -> List[str]:
        """
        Applies raw configuration values. Unusable values are reported as
        warnings and leave the current value in place.
        """
        with self._lock:
            previous = self.config
            config, warnings = previous.with_updates(**raw)
            self.config = config

            if (
                config.window_width != previous.window_width
                or config.active_instruments != previous.active_instruments
            ):
                self.ledger.reset()
                self.gate.reset(discard_pending=True)
            if (
                config.window_width != previous.window_width
                or config.close_threshold_seconds != previous.close_threshold_seconds
            ):
                self.calculator = self._build_calculator(config)
            if config.active_instruments != previous.active_instruments:
                self.rotator.set_instruments(config.active_instruments)
            if config.rotation_period_seconds != previous.rotation_period_seconds:
                self.rotator.rotation_period_seconds = config.rotation_period_seconds
            self.emitter.min_confidence = config.min_confidence
            if config.result_buffer_capacity != self.buffer.capacity:
                self.buffer.resize(config.result_buffer_capacity)

            for warning in warnings:
                self._notice(NoticeKind.CONFIGURATION, warning)

            running = self._running
            disabled = describe_disabled_reason(config) is not None
            periods_changed = (
                config.tick_period_seconds != previous.tick_period_seconds
                or config.rotation_period_seconds != previous.rotation_period_seconds
            )

        if running and (disabled or periods_changed):
            self.pause()
            if not disabled:
                self.start()
        return warnings

    # Read side

    @property
    def status(self) -> SchedulerStatus:
        if describe_disabled_reason(self.config):
            return SchedulerStatus.DISABLED
        return SchedulerStatus.RUNNING if self._running else SchedulerStatus.PAUSED

    def snapshot(self) -> SchedulerSnapshot:
        with self._lock:
            status = self.status
            reason = describe_disabled_reason(self.config)
            if status == SchedulerStatus.PAUSED:
                reason = "Analysis paused"
            return SchedulerSnapshot(
                status=status,
                reason=reason,
                window=self._current_window,
                rotation=self.rotator.snapshot(),
                gate_state=self.gate.state,
                config=self.config,
                buffered_signals=len(self.buffer),
            )

    def signals(self, limit: Optional[int] = None) -> List[SignalRecord]:
        return self.buffer.items(limit)

    def notices(self) -> List[SchedulerNotice]:
        with self._lock:
            return list(self._notices)

    # Gate callbacks

    def _on_fired(self, instrument: str, window: WindowDescriptor) -> None:
        self.observer.on_trigger_fired(instrument, window)

    def _on_scored(self, instrument: str, window: WindowDescriptor, result: ScoreResult) -> None:
        with self._lock:
            record = self.emitter.emit(instrument, window, result, now=self.time_source.now())
            if record is None:
                self.structured_logger.emit(
                    "SIGNAL_REJECTED",
                    level=logging.DEBUG,
                    instrument=instrument,
                    window_id=window.id,
                    confidence=result.confidence,
                    min_confidence=self.emitter.min_confidence,
                )
                return
            self.observer.on_signal_accepted(record)

    def _on_failure(self, instrument: str, window: WindowDescriptor, exc: Exception) -> None:
        self._notice(NoticeKind.ADAPTER, f"Scoring failed for {instrument} in {window.id}: {exc}")

    def _notice(self, kind: NoticeKind, message: str) -> None:
        notice = SchedulerNotice(kind=kind, message=message, at=self.time_source.now())
        logger.warning("%s: %s", kind.value, message)
        with self._lock:
            self._notices.append(notice)
        self.observer.on_notice(notice)

    def _build_calculator(self, config: SchedulerConfig) -> WindowCalculator:
        try:
            return WindowCalculator(config.window_width, config.close_threshold_seconds)
        except ConfigurationError as exc:
            self._notice(
                NoticeKind.CONFIGURATION,
                f"{exc}; using {DEFAULT_CLOSE_THRESHOLD_SECONDS}",
            )
            return WindowCalculator(config.window_width, DEFAULT_CLOSE_THRESHOLD_SECONDS)
