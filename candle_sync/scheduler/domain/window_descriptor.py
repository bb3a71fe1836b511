from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Tuple

from candle_sync.scheduler.domain.exceptions import ConfigurationError


class WindowWidth(Enum):
    ONE_MINUTE = "1m"
    TWO_MINUTES = "2m"
    THREE_MINUTES = "3m"
    FIVE_MINUTES = "5m"

    @property
    def seconds(self) -> int:
        return int(self.value[:-1]) * 60

    @property
    def milliseconds(self) -> int:
        return self.seconds * 1000

    @classmethod
    def parse(cls, raw) -> "WindowWidth":
        if isinstance(raw, WindowWidth):
            return raw
        text = str(raw).strip().lower()
        for width in cls:
            if width.value == text:
                return width
        raise ConfigurationError(
            f"Unsupported window width {raw!r}; expected one of "
            + ", ".join(w.value for w in cls)
        )


@dataclass(frozen=True)
class WindowDescriptor:
    """
    One wall-clock aligned window ("candle") observed at a given instant.

    id is a pure function of (window start, width): every observer that
    evaluates an instant inside the same window computes the same id.
    A fresh descriptor is produced on every tick; none is ever mutated.
    """
    id: str
    start_ms: int
    end_ms: int
    width: WindowWidth
    seconds_remaining: int
    is_closed: bool

    @property
    def start_at(self) -> datetime:
        return datetime.fromtimestamp(self.start_ms / 1000, tz=timezone.utc)

    @property
    def end_at(self) -> datetime:
        return datetime.fromtimestamp(self.end_ms / 1000, tz=timezone.utc)


def make_window_id(start_ms: int, width: WindowWidth) -> str:
    return f"{start_ms}:{width.value}"


def split_window_id(window_id: str) -> Tuple[int, WindowWidth]:
    start, _, width = window_id.partition(":")
    return int(start), WindowWidth.parse(width)
