from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException

from candle_sync.catalog.services.instrument_catalog_service import InstrumentCatalogService
from candle_sync.core.logging.structured_runtime_logger import StructuredRuntimeLogger
from candle_sync.scheduler.domain.rotation_state import RotationState
from candle_sync.scheduler.domain.signal_record import SignalRecord
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor
from candle_sync.scheduler.services.candle_scheduler import CandleScheduler

_CONFIG_KEYS = ("window_width", "min_confidence", "tracked_instruments", "close_threshold_seconds")


def build_dashboard_app(
    scheduler: CandleScheduler,
    catalog: Optional[InstrumentCatalogService] = None,
    runtime_logger: Optional[StructuredRuntimeLogger] = None,
) -> FastAPI:
    """
    HTTP boundary for the dashboard: read-only snapshots plus the
    start/pause and configuration controls.
    """
    app = FastAPI(title="candle-sync")
    runtime_logger = runtime_logger or StructuredRuntimeLogger()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/status")
    def status():
        snapshot = scheduler.snapshot()
        return {
            "status": snapshot.status.value,
            "reason": snapshot.reason,
            "window": window_view(snapshot.window) if snapshot.window else None,
            "rotation": rotation_view(snapshot.rotation),
            "gate_state": snapshot.gate_state.value,
            "config": {
                "window_width": snapshot.config.window_width.value,
                "min_confidence": snapshot.config.min_confidence,
                "tracked_instruments": [
                    {"name": i.name, "active": i.active} for i in snapshot.config.tracked_instruments
                ],
                "close_threshold_seconds": snapshot.config.close_threshold_seconds,
                "rotation_period_seconds": snapshot.config.rotation_period_seconds,
                "result_buffer_capacity": snapshot.config.result_buffer_capacity,
            },
            "buffered_signals": snapshot.buffered_signals,
            "notices": [
                {"kind": n.kind.value, "message": n.message, "at": n.at.isoformat()}
                for n in scheduler.notices()
            ],
        }

    @app.get("/signals")
    def signals(limit: int = 30):
        return {"items": [signal_view(r) for r in scheduler.signals(limit=limit)]}

    @app.post("/control/start")
    def start():
        started = scheduler.start()
        runtime_logger.emit("CONTROL_START", started=started)
        if not started:
            raise HTTPException(status_code=409, detail=scheduler.snapshot().reason or "Cannot start")
        return {"status": scheduler.status.value}

    @app.post("/control/pause")
    def pause():
        scheduler.pause()
        runtime_logger.emit("CONTROL_PAUSE")
        return {"status": scheduler.status.value}

    @app.put("/config")
    def update_config(payload: Dict[str, Any]):
        updates = {k: payload[k] for k in _CONFIG_KEYS if k in payload}
        if not updates:
            raise HTTPException(status_code=400, detail="No recognized configuration keys")
        warnings = scheduler.reconfigure(**updates)
        runtime_logger.emit("CONFIG_UPDATED", keys=sorted(updates), warnings=warnings)
        return {"status": scheduler.status.value, "warnings": warnings}

    @app.get("/catalog")
    def get_catalog():
        if catalog is None:
            raise HTTPException(status_code=404, detail="No instrument catalog configured")
        snapshot = catalog.snapshot()
        return {
            "source": snapshot.source,
            "api_available": snapshot.api_available,
            "items": [
                {
                    "symbol": l.symbol,
                    "name": l.name,
                    "active": l.active,
                    "payout": l.payout,
                    "category": l.category,
                }
                for l in snapshot.listings
            ],
        }

    return app


def window_view(window: WindowDescriptor) -> Dict[str, Any]:
    return {
        "id": window.id,
        "width": window.width.value,
        "start_at": window.start_at.isoformat(),
        "end_at": window.end_at.isoformat(),
        "seconds_remaining": window.seconds_remaining,
        "is_closed": window.is_closed,
    }


def rotation_view(rotation: RotationState) -> Dict[str, Any]:
    return {
        "live_instrument": rotation.live_instrument,
        "index": rotation.index,
        "instruments": list(rotation.instruments),
        "rotation_period_seconds": rotation.rotation_period_seconds,
    }


def signal_view(record: SignalRecord) -> Dict[str, Any]:
    return {
        "id": str(record.id),
        "instrument": record.instrument,
        "window_id": record.window_id,
        "direction": record.direction.value,
        "confidence": record.confidence,
        "created_at": record.created_at.isoformat(),
        "window_close_at": record.window_close_at.isoformat(),
        "details": record.details,
    }
