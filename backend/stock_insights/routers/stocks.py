import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stock_insights.config import settings
from stock_insights.database import get_db
from stock_insights.instruments import get_profile
from stock_insights.repositories.stock_repo import StockRepository
from stock_insights.routers.deps import error_response
from stock_insights.schemas.stock import (
    CompanyPreferredResponse,
    ErrorResponse,
    StockDetailResponse,
    StockListResponse,
    StockResponse,
    TrackedSymbolCreate,
    TrackedSymbolsResponse,
)
from stock_insights.services.quote_fetcher import find_preferred_variants
from stock_insights.services.refresh_service import get_refresher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stocks"])

_ERRORS = {500: {"model": ErrorResponse, "description": "Internal failure"}}


@router.get("/stocks", response_model=StockListResponse, responses=_ERRORS, summary="List stored quote snapshots")
async def list_stocks(db: AsyncSession = Depends(get_db)):
    """Return every stored record, most recently refreshed first.

    `lastUpdated` is the refresh time of the newest record (null when the
    store is empty) and `type` names the configured instrument kind.
    """
    try:
        stocks = await StockRepository(db).list_all()
    except Exception as e:
        logger.exception("Error fetching stocks from database")
        return error_response(500, str(e))

    data = [StockResponse.model_validate(s) for s in stocks]
    return StockListResponse(
        data=data,
        last_updated=data[0].last_updated if data else None,
        count=len(data),
        type=get_profile(settings.instrument_kind).label,
    )


@router.get(
    "/stocks/company/{symbol}",
    response_model=CompanyPreferredResponse,
    responses=_ERRORS,
    summary="Find a company's preferred stocks",
)
async def list_company_preferred(symbol: str):
    """Probe the preferred series `-PA` through `-PL` of a company ticker
    (e.g. `BAC` -> `BAC-PA` ... `BAC-PL`) and return fresh quotes for the
    series that trade. Results are not persisted.

    Probing is rate limited and takes several seconds.
    """
    company = symbol.strip().upper()
    try:
        records = await find_preferred_variants(company)
    except Exception as e:
        logger.exception("Error fetching preferred stocks for %s", company)
        return error_response(500, str(e))
    return CompanyPreferredResponse(data=records, company=company, count=len(records))


@router.get(
    "/stocks/{symbol}",
    response_model=StockDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "No record for this symbol"}, **_ERRORS},
    summary="Get the stored snapshot for one symbol",
)
async def get_stock(symbol: str, db: AsyncSession = Depends(get_db)):
    """Exact match on the uppercased symbol."""
    try:
        stock = await StockRepository(db).find_by_symbol(symbol)
    except Exception as e:
        logger.exception("Error fetching stock %s", symbol)
        return error_response(500, str(e))

    if stock is None:
        return error_response(404, get_profile(settings.instrument_kind).not_found_message)
    return StockDetailResponse(data=StockResponse.model_validate(stock))


@router.get("/tracked-symbols", response_model=TrackedSymbolsResponse, responses=_ERRORS, summary="List refreshed symbols")
async def list_tracked_symbols():
    """Return the symbols each refresh cycle fetches, in fetch order."""
    try:
        symbols = get_refresher().symbols
    except Exception as e:
        logger.exception("Error reading tracked symbols")
        return error_response(500, str(e))
    return TrackedSymbolsResponse(data=symbols, count=len(symbols))


@router.post(
    "/tracked-symbols",
    response_model=TrackedSymbolsResponse,
    status_code=201,
    responses=_ERRORS,
    summary="Add a symbol to the refresh set",
)
async def add_tracked_symbol(body: TrackedSymbolCreate):
    """Add a ticker to the tracked set. It is fetched from the next refresh
    cycle on. Adding a symbol that is already tracked changes nothing.
    The set lives in memory and resets to the configured symbols on restart.
    """
    try:
        refresher = get_refresher()
        refresher.add_symbol(body.symbol)
        symbols = refresher.symbols
    except Exception as e:
        logger.exception("Error adding tracked symbol %s", body.symbol)
        return error_response(500, str(e))
    return TrackedSymbolsResponse(data=symbols, count=len(symbols))
