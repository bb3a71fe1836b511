from datetime import datetime, timedelta, timezone

import pytest

from candle_sync.core.time.frozen_time_source import FrozenTimeSource
from candle_sync.core.time.time_source import to_epoch_ms
from candle_sync.scheduler.domain.exceptions import ConfigurationError
from candle_sync.scheduler.domain.window_descriptor import WindowWidth, split_window_id
from candle_sync.scheduler.services.window_calculator import WindowCalculator

NOON = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _ms(at: datetime) -> int:
    return to_epoch_ms(at)


def test_window_at_exact_start():
    calc = WindowCalculator(WindowWidth.ONE_MINUTE, close_threshold_seconds=5)

    window = calc.describe(_ms(NOON))

    assert window.start_ms == _ms(NOON)
    assert window.end_ms == _ms(NOON + timedelta(minutes=1))
    assert window.start_at == NOON
    assert window.end_at == NOON + timedelta(minutes=1)
    assert window.seconds_remaining == 60
    assert window.is_closed is False
    assert window.id == f"{_ms(NOON)}:1m"


def test_window_near_close_counts_as_closed():
    calc = WindowCalculator(WindowWidth.ONE_MINUTE, close_threshold_seconds=5)

    at_57 = calc.describe(_ms(NOON + timedelta(seconds=57)))
    at_54 = calc.describe(_ms(NOON + timedelta(seconds=54)))
    at_55 = calc.describe(_ms(NOON + timedelta(seconds=55)))

    assert at_57.seconds_remaining == 3
    assert at_57.is_closed is True
    assert at_54.seconds_remaining == 6
    assert at_54.is_closed is False
    assert at_55.is_closed is True


def test_remaining_seconds_round_up():
    calc = WindowCalculator(WindowWidth.ONE_MINUTE)

    window = calc.describe(_ms(NOON) + 57_001)

    assert window.seconds_remaining == 3


def test_same_id_for_instants_inside_one_window():
    for width in WindowWidth:
        calc = WindowCalculator(width)
        start = _ms(NOON)
        first = calc.describe(start + 1)
        second = calc.describe(start + width.milliseconds - 1)
        assert first.id == second.id
        assert first.start_ms == second.start_ms


def test_next_window_gets_new_id():
    calc = WindowCalculator(WindowWidth.ONE_MINUTE)

    before = calc.describe(_ms(NOON) - 1)
    after = calc.describe(_ms(NOON))

    assert before.id != after.id
    assert before.end_ms == after.start_ms


def test_five_minute_window_alignment():
    calc = WindowCalculator(WindowWidth.FIVE_MINUTES)

    window = calc.describe(_ms(NOON + timedelta(minutes=7, seconds=30)))

    assert window.start_at == NOON + timedelta(minutes=5)
    assert window.end_at == NOON + timedelta(minutes=10)
    assert window.seconds_remaining == 150
    assert split_window_id(window.id) == (window.start_ms, WindowWidth.FIVE_MINUTES)


def test_same_instant_different_width_yields_different_id():
    at = _ms(NOON)

    one = WindowCalculator(WindowWidth.ONE_MINUTE).describe(at)
    two = WindowCalculator(WindowWidth.TWO_MINUTES).describe(at)

    assert one.start_ms == two.start_ms
    assert one.id != two.id


def test_clock_moving_backwards_recomputes_fresh_window():
    clock = FrozenTimeSource(NOON + timedelta(minutes=3, seconds=10))
    calc = WindowCalculator(WindowWidth.ONE_MINUTE)

    later = calc.current(clock)
    clock.set(NOON + timedelta(seconds=10))
    earlier = calc.current(clock)

    assert earlier.start_at == NOON
    assert earlier.id != later.id
    assert earlier == calc.describe(_ms(NOON + timedelta(seconds=10)))


def test_threshold_must_fit_inside_window():
    with pytest.raises(ConfigurationError):
        WindowCalculator(WindowWidth.ONE_MINUTE, close_threshold_seconds=0)
    with pytest.raises(ConfigurationError):
        WindowCalculator(WindowWidth.ONE_MINUTE, close_threshold_seconds=60)


def test_width_parse():
    assert WindowWidth.parse("3m") == WindowWidth.THREE_MINUTES
    assert WindowWidth.parse(" 5M ") == WindowWidth.FIVE_MINUTES
    assert WindowWidth.TWO_MINUTES.milliseconds == 120_000
    with pytest.raises(ConfigurationError):
        WindowWidth.parse("15m")
