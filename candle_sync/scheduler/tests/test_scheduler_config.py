from candle_sync.config.settings import Settings
from candle_sync.scheduler.domain.scheduler_config import (
    SchedulerConfig,
    describe_disabled_reason,
    parse_instruments,
)
from candle_sync.scheduler.domain.tracked_instrument import TrackedInstrument
from candle_sync.scheduler.domain.window_descriptor import WindowWidth


def test_from_settings_defaults():
    config, warnings = SchedulerConfig.from_settings(Settings())

    assert warnings == []
    assert config.window_width == WindowWidth.ONE_MINUTE
    assert config.min_confidence == 75
    assert config.active_instruments == ("EURUSD_otc", "GBPUSD_otc", "USDJPY_otc")
    assert config.rotation_period_seconds == 5.0
    assert config.result_buffer_capacity == 30


def test_from_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("CANDLE_SYNC_WINDOW_WIDTH", "3m")
    monkeypatch.setenv("CANDLE_SYNC_MIN_CONFIDENCE", "90")
    monkeypatch.setenv("CANDLE_SYNC_TRACKED_INSTRUMENTS", "B, A ,B,,C")

    config, warnings = SchedulerConfig.from_settings(Settings())

    assert warnings == []
    assert config.window_width == WindowWidth.THREE_MINUTES
    assert config.min_confidence == 90
    assert config.active_instruments == ("B", "A", "C")


def test_invalid_values_fall_back_with_warnings(monkeypatch):
    monkeypatch.setenv("CANDLE_SYNC_WINDOW_WIDTH", "15m")
    monkeypatch.setenv("CANDLE_SYNC_MIN_CONFIDENCE", "abc")
    monkeypatch.setenv("CANDLE_SYNC_RESULT_BUFFER_CAPACITY", "500")

    config, warnings = SchedulerConfig.from_settings(Settings())

    assert config.window_width == WindowWidth.ONE_MINUTE
    assert config.min_confidence == 75
    assert config.result_buffer_capacity == 30
    assert len(warnings) == 3


def test_min_confidence_range():
    config = SchedulerConfig()

    low, low_warnings = config.with_updates(min_confidence=49)
    high, high_warnings = config.with_updates(min_confidence=96)
    ok, ok_warnings = config.with_updates(min_confidence="95")

    assert low.min_confidence == 75 and low_warnings
    assert high.min_confidence == 75 and high_warnings
    assert ok.min_confidence == 95 and ok_warnings == []


def test_non_positive_periods_are_rejected():
    config, warnings = SchedulerConfig().with_updates(rotation_period_seconds=0, tick_period_seconds="x")

    assert config.rotation_period_seconds == 5.0
    assert config.tick_period_seconds == 1.0
    assert len(warnings) == 2


def test_empty_instrument_set_disables():
    config, warnings = SchedulerConfig().with_updates(tracked_instruments="  , ")

    assert config.active_instruments == ()
    assert warnings == ["No tracked instruments; analysis is disabled"]
    assert describe_disabled_reason(config) == "No tracked instruments"


def test_inactive_instruments_are_not_rotated():
    instruments = parse_instruments(
        [{"name": "A", "active": False}, "B", TrackedInstrument("C", active=True)]
    )
    config, _ = SchedulerConfig().with_updates(tracked_instruments=instruments)

    assert [i.name for i in config.tracked_instruments] == ["A", "B", "C"]
    assert config.active_instruments == ("B", "C")
