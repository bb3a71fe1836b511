import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """
    Repeating daemon-thread timer.
    A stopped timer cannot be restarted; build a new one instead.
    """

    def __init__(self, name: str, interval_seconds: float, callback: Callable[[], None]):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.callback = callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self.run_forever, name=self.name, daemon=True)
        self._thread.start()

    def run_forever(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.callback()
            except Exception:
                logger.exception("Timer %s callback failed", self.name)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)
