import time
from datetime import datetime, timezone

from candle_sync.core.time.time_source import TimeSource


class SystemTimeSource(TimeSource):
    """
    Production clock. May jump backwards on system clock adjustment;
    window ids are recomputed from each instant so that self-heals.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000
