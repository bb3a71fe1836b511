from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NoticeKind(Enum):
    CONFIGURATION = "configuration"
    ADAPTER = "adapter"


@dataclass(frozen=True)
class SchedulerNotice:
    """
    Non-fatal condition surfaced to observers and the dashboard.
    """
    kind: NoticeKind
    message: str
    at: datetime
