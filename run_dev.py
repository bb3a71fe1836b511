import uvicorn

from candle_sync.api.dashboard_api import build_dashboard_app
from candle_sync.catalog.adapters.http_catalog_client import HttpInstrumentCatalogClient
from candle_sync.catalog.services.instrument_catalog_service import InstrumentCatalogService
from candle_sync.config.settings import settings
from candle_sync.core.logging.structured_runtime_logger import configure_logging
from candle_sync.scheduler.services.candle_scheduler import CandleScheduler
from candle_sync.scheduler.services.logging_observer import LoggingSchedulerObserver
from candle_sync.scheduler.services.random_confluence_scorer import RandomConfluenceScorer


def main():
    configure_logging(settings.LOG_LEVEL)

    # 1. Instrument catalog (remote with built-in fallback)
    catalog = InstrumentCatalogService(
        remote=HttpInstrumentCatalogClient(
            base_url=settings.CATALOG_URL,
            timeout=settings.CATALOG_TIMEOUT_SECONDS,
        ),
        min_payout=settings.CATALOG_MIN_PAYOUT,
    )
    catalog.load()

    # 2. Scheduler
    scheduler = CandleScheduler.from_settings(
        settings,
        scoring_adapter=RandomConfluenceScorer(),
        observer=LoggingSchedulerObserver(),
    )
    if settings.AUTO_START:
        scheduler.start()

    # 3. Dashboard API
    app = build_dashboard_app(scheduler, catalog=catalog)
    try:
        uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
