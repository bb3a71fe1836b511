import math

from candle_sync.core.time.time_source import TimeSource
from candle_sync.scheduler.domain.exceptions import ConfigurationError
from candle_sync.scheduler.domain.window_descriptor import (
    WindowDescriptor,
    WindowWidth,
    make_window_id,
)

DEFAULT_CLOSE_THRESHOLD_SECONDS = 5


class WindowCalculator:
    """
    Derives the current window purely from an instant and a width.

    Close policy: a window counts as closed once seconds_remaining drops
    to close_threshold_seconds or below. remaining time is rounded up, so
    it never reaches zero inside a window and the threshold must be >= 1.

    Holds no state between calls: any instant, including one earlier than
    the previous call, yields the window for that instant.
    """

    def __init__(
        self,
        width: WindowWidth = WindowWidth.ONE_MINUTE,
        close_threshold_seconds: int = DEFAULT_CLOSE_THRESHOLD_SECONDS,
    ):
        if close_threshold_seconds < 1 or close_threshold_seconds >= width.seconds:
            raise ConfigurationError(
                f"close_threshold_seconds must be in 1..{width.seconds - 1}"
            )
        self.width = width
        self.close_threshold_seconds = close_threshold_seconds

    def describe(self, now_ms: int) -> WindowDescriptor:
        width_ms = self.width.milliseconds
        start_ms = (now_ms // width_ms) * width_ms
        end_ms = start_ms + width_ms
        seconds_remaining = max(0, math.ceil((end_ms - now_ms) / 1000))
        return WindowDescriptor(
            id=make_window_id(start_ms, self.width),
            start_ms=start_ms,
            end_ms=end_ms,
            width=self.width,
            seconds_remaining=seconds_remaining,
            is_closed=seconds_remaining <= self.close_threshold_seconds,
        )

    def current(self, time_source: TimeSource) -> WindowDescriptor:
        return self.describe(time_source.now_ms())
