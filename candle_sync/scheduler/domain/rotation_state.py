from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class RotationState:
    live_instrument: Optional[str]
    index: int
    instruments: Tuple[str, ...]
    rotation_period_seconds: float
