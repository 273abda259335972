import logging

from pydantic_settings import BaseSettings

from stock_insights.instruments import InstrumentKind, get_profile, normalize_symbols


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://stocks:stocks@db:5432/stocks"
    instrument_kind: InstrumentKind = InstrumentKind.STOCK
    # Comma-separated override of the instrument kind's default symbol list
    symbols: str = ""

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Every 15 minutes during US trading hours, hourly otherwise
    market_hours_cron: str = "*/15 9-16 * * 1-5"
    off_hours_cron: str = "0 * * * *"
    scheduler_timezone: str = "America/New_York"
    run_on_startup: bool = True

    fetch_delay_seconds: float = 1.0
    probe_delay_seconds: float = 0.5
    insight_batch_size: int = 3
    insight_batch_delay_seconds: float = 2.0
    provider_timeout_seconds: float = 30.0

    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @property
    def tracked_symbols(self) -> list[str]:
        """Configured symbol set: the ``SYMBOLS`` override, else the kind's defaults."""
        if self.symbols.strip():
            return normalize_symbols(self.symbols.split(","))
        return list(get_profile(self.instrument_kind).default_symbols)


settings = Settings()


def configure_logging() -> None:
    """Send ``stock_insights.*`` records to stderr at LOG_LEVEL.

    uvicorn only configures its own loggers, so both entry points call this
    before anything logs.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
