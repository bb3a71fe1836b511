import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from candle_sync.scheduler.domain.scheduler_notice import SchedulerNotice
from candle_sync.scheduler.domain.signal_record import SignalRecord
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor

logger = logging.getLogger(__name__)


class SchedulerObserver(ABC):
    """
    Hook interface for scheduler events.
    Implementations read what they are given and never mutate scheduler state.
    """

    @abstractmethod
    def on_window_tick(self, window: WindowDescriptor) -> None:
        """Called once per clock tick with the freshly computed window."""
        pass

    @abstractmethod
    def on_trigger_fired(self, instrument: str, window: WindowDescriptor) -> None:
        """Called when the gate dispatches analysis for a pair."""
        pass

    @abstractmethod
    def on_signal_accepted(self, record: SignalRecord) -> None:
        pass

    @abstractmethod
    def on_rotation(self, previous: Optional[str], current: Optional[str]) -> None:
        pass

    @abstractmethod
    def on_notice(self, notice: SchedulerNotice) -> None:
        pass


class NullSchedulerObserver(SchedulerObserver):
    """
    Default no-op observer.
    """

    def on_window_tick(self, window: WindowDescriptor) -> None:
        pass

    def on_trigger_fired(self, instrument: str, window: WindowDescriptor) -> None:
        pass

    def on_signal_accepted(self, record: SignalRecord) -> None:
        pass

    def on_rotation(self, previous: Optional[str], current: Optional[str]) -> None:
        pass

    def on_notice(self, notice: SchedulerNotice) -> None:
        pass


class CompositeSchedulerObserver(SchedulerObserver):
    """
    Fans events out to several observers. A failing observer is logged
    and skipped so it never breaks a tick.
    """

    def __init__(self, observers: Iterable[SchedulerObserver] = ()):
        self.observers: List[SchedulerObserver] = list(observers)

    def add(self, observer: SchedulerObserver) -> None:
        self.observers.append(observer)

    def on_window_tick(self, window: WindowDescriptor) -> None:
        self._fan_out("on_window_tick", window)

    def on_trigger_fired(self, instrument: str, window: WindowDescriptor) -> None:
        self._fan_out("on_trigger_fired", instrument, window)

    def on_signal_accepted(self, record: SignalRecord) -> None:
        self._fan_out("on_signal_accepted", record)

    def on_rotation(self, previous: Optional[str], current: Optional[str]) -> None:
        self._fan_out("on_rotation", previous, current)

    def on_notice(self, notice: SchedulerNotice) -> None:
        self._fan_out("on_notice", notice)

    def _fan_out(self, method: str, *args) -> None:
        for observer in list(self.observers):
            try:
                getattr(observer, method)(*args)
            except Exception:
                logger.exception("Observer %s failed in %s", type(observer).__name__, method)
