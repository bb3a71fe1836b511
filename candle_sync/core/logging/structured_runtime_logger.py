import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class StructuredRuntimeLogger:
    """
    JSON-lines logger for scheduler, catalog and API paths.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("candle_sync.runtime")

    def emit(self, event_type: str, level: int = logging.INFO, **fields: Any) -> None:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
        }
        payload.update(fields)
        self._logger.log(level, json.dumps(payload, default=str, ensure_ascii=True))


def configure_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
