from abc import ABC, abstractmethod

from candle_sync.scheduler.domain.signal_record import ScoreResult
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor


class ScoringAdapter(ABC):
    """
    Opaque scoring pipeline invoked once per (instrument, window) trigger.
    May raise; the trigger gate treats any exception as a failed call.
    """

    @abstractmethod
    def score(self, instrument: str, window: WindowDescriptor) -> ScoreResult:
        pass
