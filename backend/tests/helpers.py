"""Shared test helpers: Yahoo payload factories and store seeding."""

from datetime import datetime

from stock_insights.repositories.stock_repo import StockRepository
from stock_insights.schemas.stock import QuoteRecord


def make_price_module(symbol: str = "AAPL", price: float = 150.0, change_pct: float = 0.02, **overrides) -> dict:
    """Create a dict that looks like Yahoo's price module for one symbol."""
    data = {
        "symbol": symbol,
        "longName": f"{symbol} Inc.",
        "shortName": symbol,
        "currency": "USD",
        "exchangeName": "NasdaqGS",
        "regularMarketOpen": price - 1.0,
        "regularMarketDayHigh": price + 2.0,
        "regularMarketDayLow": price - 2.0,
        "regularMarketPrice": price,
        "regularMarketVolume": 50_000_000,
        "regularMarketChangePercent": change_pct,
        "marketCap": 2_500_000_000_000,
        "averageDailyVolume3Month": 55_000_000,
    }
    data.update(overrides)
    return data


def make_summary(**overrides) -> dict[str, dict]:
    """Create supplementary statistics as returned by fetch_quote_summary."""
    summary = {
        "summaryDetail": {
            "trailingPE": 28.5,
            "dividendYield": 0.005,
            "dividendRate": 0.96,
            "fiftyTwoWeekHigh": 199.6,
            "fiftyTwoWeekLow": 124.2,
            "averageVolume": 60_000_000,
            "exDividendDate": "2026-08-11 00:00:00",
        },
        "defaultKeyStatistics": {"beta": 1.25},
        "assetProfile": {"sector": "Technology", "country": "United States"},
        "calendarEvents": {"dividendDate": 1789171200},
    }
    for module, values in overrides.items():
        summary[module] = values
    return summary


def make_record(symbol: str = "AAPL", close: float = 150.0, **overrides) -> QuoteRecord:
    data = {
        "symbol": symbol,
        "name": f"{symbol} Inc.",
        "open": close - 1.0,
        "high": close + 2.0,
        "low": close - 2.0,
        "close": close,
        "volume": 1_000_000,
        "market_cap": 1_000_000_000,
        "pe_ratio": 20.0,
        "percent_change": 1.5,
        "sector": "Technology",
    }
    data.update(overrides)
    return QuoteRecord(**data)


async def seed_stock(
    db, symbol: str = "AAPL", *, last_updated: datetime | None = None,
    ai_insights: str = "Steady performer.", **overrides,
):
    """Upsert one record into the store through the repository."""
    return await StockRepository(db).upsert(
        make_record(symbol, **overrides),
        ai_insights=ai_insights,
        last_updated=last_updated or datetime(2026, 10, 16, 14, 30),
    )
