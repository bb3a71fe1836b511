from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from candle_sync.core.time.time_source import to_epoch_ms
from candle_sync.scheduler.domain.signal_record import Direction, ScoreResult, SignalRecord
from candle_sync.scheduler.domain.window_descriptor import WindowWidth
from candle_sync.scheduler.services.signal_emitter import SignalEmitter
from candle_sync.scheduler.services.window_calculator import WindowCalculator
from candle_sync.scheduler.store.signal_buffer import SignalBuffer

NOON = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
WINDOW = WindowCalculator(WindowWidth.ONE_MINUTE).describe(to_epoch_ms(NOON + timedelta(seconds=57)))


def _record(n: int) -> SignalRecord:
    return SignalRecord(
        id=uuid4(),
        instrument=f"I{n}",
        window_id=WINDOW.id,
        confidence=80.0,
        direction=Direction.CALL,
        created_at=NOON,
        window_close_at=WINDOW.end_at,
    )


@pytest.mark.parametrize(
    "confidence,expected",
    [(74.0, False), (74.9, False), (75.0, True), (75.1, True), (95.0, True), (0.0, False)],
)
def test_threshold_gating(confidence, expected):
    buffer = SignalBuffer(capacity=30)
    emitter = SignalEmitter(buffer, min_confidence=75)

    record = emitter.emit(
        "EURUSD_otc",
        WINDOW,
        ScoreResult(accepted=True, confidence=confidence, direction=Direction.CALL),
        now=NOON,
    )

    assert (record is not None) is expected
    assert len(buffer) == (1 if expected else 0)


def test_emitted_record_carries_window_and_details():
    buffer = SignalBuffer(capacity=30)
    emitter = SignalEmitter(buffer, min_confidence=60)

    record = emitter.emit(
        "EURUSD_otc",
        WINDOW,
        ScoreResult(
            accepted=True, confidence=88.0, direction=Direction.PUT, details={"strategy": "x"}
        ),
        now=NOON,
    )

    assert record.instrument == "EURUSD_otc"
    assert record.window_id == WINDOW.id
    assert record.window_close_at == NOON + timedelta(minutes=1)
    assert record.direction == Direction.PUT
    assert record.details == {"strategy": "x"}
    assert buffer.latest() == record


def test_buffer_is_bounded_newest_first():
    buffer = SignalBuffer(capacity=20)
    records = [_record(n) for n in range(25)]

    for record in records:
        buffer.append(record)

    items = buffer.items()
    assert len(buffer) == 20
    assert items[0] is records[-1]
    assert items[-1] is records[5]
    assert records[4] not in items


def test_buffer_items_limit_and_clear():
    buffer = SignalBuffer(capacity=20)
    for n in range(3):
        buffer.append(_record(n))

    assert [r.instrument for r in buffer.items(limit=2)] == ["I2", "I1"]

    buffer.clear()
    assert buffer.items() == []
    assert buffer.latest() is None


def test_buffer_shrink_keeps_newest():
    buffer = SignalBuffer(capacity=30)
    for n in range(30):
        buffer.append(_record(n))

    buffer.resize(20)

    assert len(buffer) == 20
    assert buffer.items()[0].instrument == "I29"
    assert buffer.items()[-1].instrument == "I10"


def test_buffer_rejects_zero_capacity():
    with pytest.raises(ValueError):
        SignalBuffer(capacity=0)
