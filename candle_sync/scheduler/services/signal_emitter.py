import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from candle_sync.scheduler.domain.signal_record import ScoreResult, SignalRecord
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor
from candle_sync.scheduler.store.signal_buffer import SignalBuffer

logger = logging.getLogger(__name__)


class SignalEmitter:
    """
    Turns a score into a SignalRecord when its confidence clears the
    configured minimum, and feeds the bounded buffer.
    """

    def __init__(self, buffer: SignalBuffer, min_confidence: int = 75):
        self.buffer = buffer
        self.min_confidence = min_confidence

    def emit(
        self,
        instrument: str,
        window: WindowDescriptor,
        result: ScoreResult,
        now: Optional[datetime] = None,
    ) -> Optional[SignalRecord]:
        if result.confidence < self.min_confidence:
            logger.debug(
                "Signal for %s in %s below threshold (%.1f < %d)",
                instrument,
                window.id,
                result.confidence,
                self.min_confidence,
            )
            return None

        record = SignalRecord(
            id=uuid4(),
            instrument=instrument,
            window_id=window.id,
            confidence=result.confidence,
            direction=result.direction,
            created_at=now or datetime.now(timezone.utc),
            window_close_at=window.end_at,
            accepted=result.accepted,
            details=dict(result.details),
        )
        self.buffer.append(record)
        return record
