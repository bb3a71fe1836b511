from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GateState(Enum):
    IDLE = "idle"
    ELIGIBLE = "eligible"
    FIRED = "fired"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    instrument: Optional[str]
    window_id: str
    fired: bool
    reason: str
