from datetime import datetime, timedelta

from candle_sync.core.time.time_source import TimeSource


class FrozenTimeSource(TimeSource):
    """
    Test clock.
    Moves only when told to, forwards or backwards.
    """

    def __init__(self, start_time: datetime):
        if start_time.tzinfo is None:
            raise ValueError("FrozenTimeSource requires timezone-aware datetime")
        self._current_time = start_time

    def now(self) -> datetime:
        return self._current_time

    def advance(self, delta: timedelta) -> datetime:
        self._current_time += delta
        return self._current_time

    def set(self, at: datetime) -> None:
        if at.tzinfo is None:
            raise ValueError("FrozenTimeSource requires timezone-aware datetime")
        self._current_time = at
