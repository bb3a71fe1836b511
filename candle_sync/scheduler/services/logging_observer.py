import logging
from typing import Optional

from candle_sync.core.logging.structured_runtime_logger import StructuredRuntimeLogger
from candle_sync.scheduler.domain.scheduler_notice import SchedulerNotice
from candle_sync.scheduler.domain.signal_record import SignalRecord
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor
from candle_sync.scheduler.interfaces.scheduler_observer import SchedulerObserver


class LoggingSchedulerObserver(SchedulerObserver):
    """
    Writes scheduler events as structured JSON lines.
    Window ticks go out at DEBUG since there is one per second.
    """

    def __init__(self, structured_logger: Optional[StructuredRuntimeLogger] = None):
        self.structured_logger = structured_logger or StructuredRuntimeLogger()

    def on_window_tick(self, window: WindowDescriptor) -> None:
        self.structured_logger.emit(
            "WINDOW_TICK",
            level=logging.DEBUG,
            window_id=window.id,
            seconds_remaining=window.seconds_remaining,
            is_closed=window.is_closed,
        )

    def on_trigger_fired(self, instrument: str, window: WindowDescriptor) -> None:
        self.structured_logger.emit(
            "TRIGGER_FIRED",
            instrument=instrument,
            window_id=window.id,
            window_close_at=window.end_at.isoformat(),
        )

    def on_signal_accepted(self, record: SignalRecord) -> None:
        self.structured_logger.emit(
            "SIGNAL_ACCEPTED",
            signal_id=record.id,
            instrument=record.instrument,
            window_id=record.window_id,
            direction=record.direction.value,
            confidence=record.confidence,
        )

    def on_rotation(self, previous: Optional[str], current: Optional[str]) -> None:
        self.structured_logger.emit(
            "ROTATION", level=logging.DEBUG, previous=previous, current=current
        )

    def on_notice(self, notice: SchedulerNotice) -> None:
        self.structured_logger.emit(
            "NOTICE",
            level=logging.WARNING,
            kind=notice.kind.value,
            message=notice.message,
        )
