from dataclasses import dataclass


@dataclass(frozen=True)
class TrackedInstrument:
    name: str
    active: bool = True
