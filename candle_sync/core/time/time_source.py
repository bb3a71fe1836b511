from abc import ABC, abstractmethod
from datetime import datetime


class TimeSource(ABC):
    """
    Abstract wall clock.
    All instants are UTC-aware; window math works on epoch milliseconds.
    """

    @abstractmethod
    def now(self) -> datetime:
        pass

    def now_ms(self) -> int:
        return to_epoch_ms(self.now())


def to_epoch_ms(at: datetime) -> int:
    if at.tzinfo is None:
        raise ValueError("Window math requires timezone-aware datetime")
    return int(round(at.timestamp() * 1000))
