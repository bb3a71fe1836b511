from collections import deque
from threading import Lock
from typing import Deque, List, Optional

from candle_sync.scheduler.domain.signal_record import SignalRecord


class SignalBuffer:
    """
    Bounded result cache. Newest record first; the oldest is evicted
    once capacity is reached.
    """

    def __init__(self, capacity: int = 30):
        if capacity < 1:
            raise ValueError("SignalBuffer capacity must be positive")
        self.capacity = capacity
        self._records: Deque[SignalRecord] = deque(maxlen=capacity)
        self._lock = Lock()

    def append(self, record: SignalRecord) -> None:
        with self._lock:
            self._records.appendleft(record)

    def items(self, limit: Optional[int] = None) -> List[SignalRecord]:
        with self._lock:
            out = list(self._records)
        return out if limit is None else out[: max(0, limit)]

    def latest(self) -> Optional[SignalRecord]:
        with self._lock:
            return self._records[0] if self._records else None

    def resize(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("SignalBuffer capacity must be positive")
        with self._lock:
            self.capacity = capacity
            self._records = deque(list(self._records)[:capacity], maxlen=capacity)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
