from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Dict, List, Optional

from candle_sync.scheduler.domain.window_descriptor import split_window_id


class LedgerEntryState(Enum):
    IN_FLIGHT = "in_flight"
    PROCESSED = "processed"


class DedupLedger(ABC):
    """
    Records which (instrument, window id) pairs already triggered analysis.
    Written only by the trigger gate.
    """

    @abstractmethod
    def has_processed(self, instrument: str, window_id: str) -> bool:
        pass

    @abstractmethod
    def mark_processed(self, instrument: str, window_id: str, at: Optional[datetime] = None) -> None:
        pass

    @abstractmethod
    def begin(self, instrument: str, window_id: str) -> bool:
        pass

    @abstractmethod
    def complete(self, instrument: str, window_id: str, at: Optional[datetime] = None) -> None:
        pass

    @abstractmethod
    def clear_in_flight(self, instrument: str, window_id: str) -> None:
        pass

    @abstractmethod
    def last_triggered_at(self, instrument: str) -> Optional[datetime]:
        pass

    @abstractmethod
    def processed_ids(self, instrument: str) -> List[str]:
        pass

    @abstractmethod
    def in_flight_ids(self, instrument: str) -> List[str]:
        pass

    @abstractmethod
    def instruments(self) -> List[str]:
        """Instruments that still hold at least one entry."""
        pass

    @abstractmethod
    def evict_before(self, cutoff_ms: int) -> int:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass


class InMemoryDedupLedger(DedupLedger):
    def __init__(self):
        self._entries: Dict[str, Dict[str, LedgerEntryState]] = {}
        self._last_triggered: Dict[str, datetime] = {}
        self._lock = Lock()

    def has_processed(self, instrument: str, window_id: str) -> bool:
        with self._lock:
            return window_id in self._entries.get(instrument, {})

    def mark_processed(self, instrument: str, window_id: str, at: Optional[datetime] = None) -> None:
        with self._lock:
            self._entries.setdefault(instrument, {})[window_id] = LedgerEntryState.PROCESSED
            self._last_triggered[instrument] = at or datetime.now(timezone.utc)

    def begin(self, instrument: str, window_id: str) -> bool:
        with self._lock:
            entries = self._entries.setdefault(instrument, {})
            if window_id in entries:
                return False
            entries[window_id] = LedgerEntryState.IN_FLIGHT
            return True

    def complete(self, instrument: str, window_id: str, at: Optional[datetime] = None) -> None:
        self.mark_processed(instrument, window_id, at=at)

    def clear_in_flight(self, instrument: str, window_id: str) -> None:
        with self._lock:
            entries = self._entries.get(instrument)
            if not entries:
                return
            if entries.get(window_id) == LedgerEntryState.IN_FLIGHT:
                del entries[window_id]
                if not entries:
                    del self._entries[instrument]

    def last_triggered_at(self, instrument: str) -> Optional[datetime]:
        with self._lock:
            return self._last_triggered.get(instrument)

    def processed_ids(self, instrument: str) -> List[str]:
        with self._lock:
            return [
                window_id
                for window_id, state in self._entries.get(instrument, {}).items()
                if state == LedgerEntryState.PROCESSED
            ]

    def evict_before(self, cutoff_ms: int) -> int:
        """
        Drops processed ids whose window started before cutoff_ms.
        In-flight markers are kept until their call settles.
        """
        removed = 0
        with self._lock:
            for entries in self._entries.values():
                stale = [
                    window_id
                    for window_id, state in entries.items()
                    if state == LedgerEntryState.PROCESSED
                    and split_window_id(window_id)[0] < cutoff_ms
                ]
                for window_id in stale:
                    del entries[window_id]
                removed += len(stale)
            self._drop_empty()
        return removed

    def reset(self) -> None:
        """
        Forgets processed ids. In-flight markers survive so an outstanding
        call is never dispatched twice; they are cleared when it settles.
        """
        with self._lock:
            for entries in self._entries.values():
                for window_id in [
                    w for w, state in entries.items() if state == LedgerEntryState.PROCESSED
                ]:
                    del entries[window_id]
            self._drop_empty()
            self._last_triggered.clear()

    def in_flight_ids(self, instrument: str) -> List[str]:
        with self._lock:
            return [
                window_id
                for window_id, state in self._entries.get(instrument, {}).items()
                if state == LedgerEntryState.IN_FLIGHT
            ]

    def instruments(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def _drop_empty(self) -> None:
        for instrument in [i for i, entries in self._entries.items() if not entries]:
            del self._entries[instrument]
