import logging

from fastapi import APIRouter
from fastapi.encoders import jsonable_encoder

from stock_insights.config import settings
from stock_insights.instruments import InstrumentKind, get_profile
from stock_insights.routers.deps import error_response
from stock_insights.services.quote_fetcher import fetch_quotes
from stock_insights.services.refresh_service import get_refresher
from stock_insights.utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["system"])

PREFERRED_PROBE_SYMBOL = "BAC-PL"


@router.get("/health", summary="Health check")
async def health():
    """Liveness probe. Does not touch the database or any provider.

    `refreshing` is true while a refresh cycle is running in this process.
    """
    try:
        refreshing = get_refresher().is_running
    except RuntimeError:
        refreshing = False
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": utcnow().isoformat(),
        "service": get_profile(settings.instrument_kind).service_name,
        "refreshing": refreshing,
    }


@router.get("/test-preferred", summary="Diagnose preferred stock fetching")
async def test_preferred():
    """Fetch `BAC-PL` live through the preferred-stock pipeline and return the raw record.

    A symbol Yahoo cannot resolve still returns 200 with a placeholder
    (all-zero) record; only an unexpected internal failure returns 500.
    """
    try:
        logger.info("Testing preferred stock service...")
        records = await fetch_quotes([PREFERRED_PROBE_SYMBOL], InstrumentKind.PREFERRED)
    except Exception as e:
        logger.exception("Error testing preferred stock service")
        return error_response(500, str(e), message="Preferred stock service test failed")
    return {
        "success": True,
        "message": "Preferred stock service is working",
        "testData": jsonable_encoder([r.model_dump(by_alias=True) for r in records]),
        "timestamp": utcnow().isoformat(),
    }
