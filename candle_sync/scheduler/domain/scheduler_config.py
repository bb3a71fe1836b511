from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional, Tuple

from candle_sync.scheduler.domain.exceptions import ConfigurationError
from candle_sync.scheduler.domain.tracked_instrument import TrackedInstrument
from candle_sync.scheduler.domain.window_descriptor import WindowWidth

MIN_CONFIDENCE_RANGE = (50, 95)
CLOSE_THRESHOLD_RANGE = (1, 30)
BUFFER_CAPACITY_RANGE = (20, 50)


@dataclass(frozen=True)
class SchedulerConfig:
    window_width: WindowWidth = WindowWidth.ONE_MINUTE
    min_confidence: int = 75
    tracked_instruments: Tuple[TrackedInstrument, ...] = ()
    rotation_period_seconds: float = 5.0
    tick_period_seconds: float = 1.0
    close_threshold_seconds: int = 5
    result_buffer_capacity: int = 30
    ledger_retention_windows: int = 10

    @property
    def active_instruments(self) -> Tuple[str, ...]:
        return tuple(i.name for i in self.tracked_instruments if i.active)

    @classmethod
    def from_settings(cls, settings) -> Tuple["SchedulerConfig", List[str]]:
        return cls().with_updates(
            window_width=settings.WINDOW_WIDTH,
            min_confidence=settings.MIN_CONFIDENCE,
            tracked_instruments=settings.TRACKED_INSTRUMENTS,
            rotation_period_seconds=settings.ROTATION_PERIOD_SECONDS,
            tick_period_seconds=settings.TICK_PERIOD_SECONDS,
            close_threshold_seconds=settings.CLOSE_THRESHOLD_SECONDS,
            result_buffer_capacity=settings.RESULT_BUFFER_CAPACITY,
            ledger_retention_windows=settings.LEDGER_RETENTION_WINDOWS,
        )

    def with_updates(self, **raw: Any) -> Tuple["SchedulerConfig", List[str]]:
        """
        Returns a copy with the given raw values applied.
        A value that cannot be used keeps the current one and yields a
        warning instead of raising.
        """
        warnings: List[str] = []
        changes = {}

        if raw.get("window_width") is not None:
            try:
                changes["window_width"] = WindowWidth.parse(raw["window_width"])
            except ConfigurationError as exc:
                warnings.append(f"{exc}; keeping {self.window_width.value}")

        if raw.get("tracked_instruments") is not None:
            changes["tracked_instruments"] = parse_instruments(raw["tracked_instruments"])
            if not any(i.active for i in changes["tracked_instruments"]):
                warnings.append("No tracked instruments; analysis is disabled")

        _apply_int(
            raw, "min_confidence", MIN_CONFIDENCE_RANGE, self.min_confidence, changes, warnings
        )
        _apply_int(
            raw,
            "close_threshold_seconds",
            CLOSE_THRESHOLD_RANGE,
            self.close_threshold_seconds,
            changes,
            warnings,
        )
        _apply_int(
            raw,
            "result_buffer_capacity",
            BUFFER_CAPACITY_RANGE,
            self.result_buffer_capacity,
            changes,
            warnings,
        )
        _apply_int(
            raw,
            "ledger_retention_windows",
            (0, None),
            self.ledger_retention_windows,
            changes,
            warnings,
        )
        _apply_period(raw, "rotation_period_seconds", self.rotation_period_seconds, changes, warnings)
        _apply_period(raw, "tick_period_seconds", self.tick_period_seconds, changes, warnings)

        return replace(self, **changes), warnings


def parse_instruments(raw: Any) -> Tuple[TrackedInstrument, ...]:
    """
    Accepts "A,B,C", a list of names, TrackedInstrument values or
    {"name": ..., "active": ...} mappings. Keeps the supplied order and
    drops blanks and repeated names.
    """
    if isinstance(raw, str):
        items: Iterable[Any] = raw.split(",")
    else:
        items = raw

    seen = set()
    out: List[TrackedInstrument] = []
    for item in items:
        if isinstance(item, TrackedInstrument):
            instrument = item
        elif isinstance(item, dict):
            instrument = TrackedInstrument(
                name=str(item.get("name", "")).strip(), active=bool(item.get("active", True))
            )
        else:
            instrument = TrackedInstrument(name=str(item).strip())
        if not instrument.name or instrument.name in seen:
            continue
        seen.add(instrument.name)
        out.append(instrument)
    return tuple(out)


def _apply_int(raw, key, bounds, current, changes, warnings) -> None:
    if raw.get(key) is None:
        return
    low, high = bounds
    try:
        value = int(raw[key])
    except (TypeError, ValueError):
        warnings.append(f"Invalid {key} {raw[key]!r}; keeping {current}")
        return
    if value < low or (high is not None and value > high):
        limit = f"{low}-{high}" if high is not None else f">= {low}"
        warnings.append(f"{key} {value} outside {limit}; keeping {current}")
        return
    changes[key] = value


def _apply_period(raw, key, current, changes, warnings) -> None:
    if raw.get(key) is None:
        return
    try:
        value = float(raw[key])
    except (TypeError, ValueError):
        value = None
    if value is None or value <= 0:
        warnings.append(f"Invalid {key} {raw[key]!r}; keeping {current}")
        return
    changes[key] = value


def describe_disabled_reason(config: SchedulerConfig) -> Optional[str]:
    if not config.active_instruments:
        return "No tracked instruments"
    return None
