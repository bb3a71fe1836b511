import logging
from threading import Lock
from typing import Iterable, Optional, Tuple

from candle_sync.scheduler.domain.rotation_state import RotationState

logger = logging.getLogger(__name__)


class AttentionRotator:
    """
    Moves a single attention slot across the tracked instruments.

    Order is the order instruments were supplied. The first one is live
    at registration; each rotate() advances by one, wrapping around.
    """

    def __init__(self, instruments: Iterable[str] = (), rotation_period_seconds: float = 5.0):
        self.rotation_period_seconds = rotation_period_seconds
        self._instruments: Tuple[str, ...] = tuple(instruments)
        self._index = 0
        self._lock = Lock()

    @property
    def live_instrument(self) -> Optional[str]:
        with self._lock:
            return self._live()

    def rotate(self) -> Optional[str]:
        with self._lock:
            if not self._instruments:
                return None
            self._index = (self._index + 1) % len(self._instruments)
            return self._live()

    def set_instruments(self, instruments: Iterable[str]) -> Optional[str]:
        """
        Replaces the tracked set. A live instrument that survives keeps
        the slot at its new position; otherwise the slot falls back to
        the first instrument of the new set.
        """
        with self._lock:
            previous = self._live()
            self._instruments = tuple(instruments)
            if previous is not None and previous in self._instruments:
                self._index = self._instruments.index(previous)
            else:
                self._index = 0
                if previous is not None:
                    logger.info("Live instrument %s no longer tracked; restarting rotation", previous)
            return self._live()

    def snapshot(self) -> RotationState:
        with self._lock:
            return RotationState(
                live_instrument=self._live(),
                index=self._index,
                instruments=self._instruments,
                rotation_period_seconds=self.rotation_period_seconds,
            )

    def _live(self) -> Optional[str]:
        if not self._instruments:
            return None
        return self._instruments[self._index % len(self._instruments)]
