from typing import Union

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Raw process configuration.
    Values are normalized (with fallbacks) by SchedulerConfig.from_settings,
    so numeric fields also accept strings instead of failing validation.
    """

    model_config = SettingsConfigDict(
        env_prefix="CANDLE_SYNC_",
        env_file=".env",
        extra="ignore",
    )

    # Scheduler
    WINDOW_WIDTH: str = "1m"
    MIN_CONFIDENCE: Union[int, str] = 75
    TRACKED_INSTRUMENTS: str = "EURUSD_otc,GBPUSD_otc,USDJPY_otc"
    ROTATION_PERIOD_SECONDS: Union[float, str] = 5.0
    TICK_PERIOD_SECONDS: Union[float, str] = 1.0
    CLOSE_THRESHOLD_SECONDS: Union[int, str] = 5
    RESULT_BUFFER_CAPACITY: Union[int, str] = 30
    LEDGER_RETENTION_WINDOWS: Union[int, str] = 10
    AUTO_START: bool = False

    # Instrument catalog
    CATALOG_URL: str = "http://localhost:8000"
    CATALOG_TIMEOUT_SECONDS: float = 3.0
    CATALOG_MIN_PAYOUT: float = 85.0

    # Dashboard API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8080

    LOG_LEVEL: str = "INFO"


settings = Settings()
