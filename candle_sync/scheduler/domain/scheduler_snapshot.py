from dataclasses import dataclass
from enum import Enum
from typing import Optional

from candle_sync.scheduler.domain.gate_state import GateState
from candle_sync.scheduler.domain.rotation_state import RotationState
from candle_sync.scheduler.domain.scheduler_config import SchedulerConfig
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor


class SchedulerStatus(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    DISABLED = "disabled"


@dataclass(frozen=True)
class SchedulerSnapshot:
    """
    Read-only view handed to the dashboard and other readers.
    """
    status: SchedulerStatus
    reason: Optional[str]
    window: Optional[WindowDescriptor]
    rotation: RotationState
    gate_state: GateState
    config: SchedulerConfig
    buffered_signals: int
