import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from candle_sync.core.logging.structured_runtime_logger import StructuredRuntimeLogger
from candle_sync.core.time.frozen_time_source import FrozenTimeSource
from candle_sync.core.time.system_time_source import SystemTimeSource
from candle_sync.core.time.time_source import to_epoch_ms

NOON = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_frozen_time_source_moves_only_when_told():
    clock = FrozenTimeSource(NOON)

    assert clock.now() == NOON
    assert clock.advance(timedelta(seconds=57)) == NOON + timedelta(seconds=57)
    assert clock.now_ms() == to_epoch_ms(NOON) + 57_000

    clock.set(NOON - timedelta(seconds=1))
    assert clock.now() == NOON - timedelta(seconds=1)


def test_frozen_time_source_rejects_naive_datetimes():
    with pytest.raises(ValueError):
        FrozenTimeSource(datetime(2024, 3, 1, 12, 0, 0))

    clock = FrozenTimeSource(NOON)
    with pytest.raises(ValueError):
        clock.set(datetime(2024, 3, 1, 12, 0, 0))


def test_to_epoch_ms():
    assert to_epoch_ms(NOON) == 1709294400000
    assert to_epoch_ms(NOON + timedelta(milliseconds=1)) == 1709294400001
    with pytest.raises(ValueError):
        to_epoch_ms(datetime(2024, 3, 1))


def test_system_time_source_is_utc_aware():
    clock = SystemTimeSource()

    now = clock.now()

    assert now.tzinfo is not None
    assert abs(clock.now_ms() - to_epoch_ms(now)) < 5_000


def test_structured_logger_writes_json(caplog):
    logger = logging.getLogger("candle_sync.test.structured")
    structured = StructuredRuntimeLogger(logger)

    with caplog.at_level(logging.INFO, logger="candle_sync.test.structured"):
        structured.emit("TRIGGER_FIRED", instrument="EURUSD_otc", at=NOON)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event_type"] == "TRIGGER_FIRED"
    assert payload["instrument"] == "EURUSD_otc"
    assert payload["at"] == str(NOON)
    assert "timestamp" in payload
