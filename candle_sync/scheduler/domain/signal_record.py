from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict
from uuid import UUID


class Direction(Enum):
    CALL = "CALL"
    PUT = "PUT"


@dataclass(frozen=True)
class ScoreResult:
    """
    What a scoring adapter returns for one (instrument, window) trigger.
    details is opaque to the scheduler.
    """
    accepted: bool
    confidence: float  # 0 - 100
    direction: Direction
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SignalRecord:
    id: UUID
    instrument: str
    window_id: str
    confidence: float
    direction: Direction
    created_at: datetime
    window_close_at: datetime
    accepted: bool = True
    details: Dict[str, Any] = field(default_factory=dict)
