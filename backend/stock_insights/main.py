import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stock_insights.config import configure_logging, settings
from stock_insights.database import engine
from stock_insights.instruments import get_profile
from stock_insights.routers import stocks, system
from stock_insights.scheduler import build_scheduler
from stock_insights.services.refresh_service import init_refresher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    refresher = init_refresher()
    scheduler = build_scheduler(refresher)
    scheduler.start()
    logger.info(
        "%s data refresh started for %d symbols",
        refresher.profile.label.capitalize(), len(refresher.symbols),
    )

    yield

    scheduler.shutdown(wait=False)
    await engine.dispose()


app = FastAPI(
    title="Stock Insights",
    summary="Latest quote snapshots for a fixed set of tickers, with AI commentary.",
    description=(
        "Stock Insights polls Yahoo Finance for a configured set of ordinary or "
        "preferred stocks, asks Google Gemini for a short neutral commentary on "
        "each, and stores the latest snapshot per symbol.\n\n"
        "**Key concepts:**\n"
        "- The instrument kind (`stock` or `preferred`) is chosen at deploy time "
        "and decides the default symbol set and the preferred-only fields.\n"
        "- Snapshots refresh every 15 minutes during US market hours, hourly "
        "otherwise, and once at startup. Each refresh overwrites the previous "
        "snapshot; no history is kept.\n"
        "- A symbol Yahoo could not resolve is stored with zeroed metrics rather "
        "than dropped.\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "stocks",
            "description": "Stored quote snapshots, preferred-series lookup, and the tracked symbol set.",
        },
        {
            "name": "system",
            "description": "Health checks and diagnostics.",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(stocks.router)
app.include_router(system.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "message": str(exc)},
    )


def run() -> None:
    """Console entry point: serve the API (and its scheduler) with uvicorn."""
    configure_logging()
    logger.info("Starting %s on port %d", get_profile(settings.instrument_kind).service_name, settings.port)
    uvicorn.run(
        "stock_insights.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
