"""Quote fetching: Yahoo data -> normalized QuoteRecords, one per requested symbol."""

import asyncio
import logging
from datetime import UTC, datetime

from stock_insights.config import settings
from stock_insights.instruments import InstrumentKind, InstrumentProfile, get_profile
from stock_insights.schemas.stock import QuoteRecord
from stock_insights.services.yahoo import fetch_quote, fetch_quote_summary
from stock_insights.utils import safe_float

logger = logging.getLogger(__name__)

# Mapping: output_field -> (price_key, fallbacks, multiplier)
# price_key is read from the Yahoo price module; fallbacks are (module, key)
# pairs tried in order from the supplementary statistics. The multiplier
# converts Yahoo's fractions to percentages (e.g. 0.025 -> 2.5).
FieldRule = tuple[str | None, tuple[tuple[str, str], ...], float]

QUOTE_FIELDS: dict[str, FieldRule] = {
    "open": ("regularMarketOpen", (("summaryDetail", "regularMarketOpen"), ("summaryDetail", "open")), 1),
    "high": ("regularMarketDayHigh", (("summaryDetail", "regularMarketDayHigh"), ("summaryDetail", "dayHigh")), 1),
    "low": ("regularMarketDayLow", (("summaryDetail", "regularMarketDayLow"), ("summaryDetail", "dayLow")), 1),
    "close": ("regularMarketPrice", (), 1),
    "volume": ("regularMarketVolume", (("summaryDetail", "regularMarketVolume"), ("summaryDetail", "volume")), 1),
    "market_cap": ("marketCap", (("summaryDetail", "marketCap"),), 1),
    "pe_ratio": ("trailingPE", (("summaryDetail", "trailingPE"), ("defaultKeyStatistics", "trailingPE")), 1),
    "dividend_yield": ("dividendYield", (("summaryDetail", "dividendYield"),), 100),
    "percent_change": ("regularMarketChangePercent", (), 100),
    "fifty_two_week_high": ("fiftyTwoWeekHigh", (("summaryDetail", "fiftyTwoWeekHigh"),), 1),
    "fifty_two_week_low": ("fiftyTwoWeekLow", (("summaryDetail", "fiftyTwoWeekLow"),), 1),
    "average_volume": (
        "averageDailyVolume3Month",
        (("summaryDetail", "averageVolume"), ("summaryDetail", "averageDailyVolume10Day")),
        1,
    ),
    "beta": (None, (("defaultKeyStatistics", "beta"), ("summaryDetail", "beta")), 1),
}

PREFERRED_FIELDS: dict[str, FieldRule] = {
    "dividend_rate": ("dividendRate", (("summaryDetail", "dividendRate"),), 1),
    "par_value": (None, (("summaryDetail", "parValue"),), 1),
}

_INTEGER_FIELDS = {"volume", "market_cap", "average_volume"}

# Mapping: output_field -> (price_key, fallbacks), same lookup order as above
_PREFERRED_DATE_FIELDS: dict[str, tuple[str | None, tuple[tuple[str, str], ...]]] = {
    "ex_dividend_date": ("exDividendDate", (("summaryDetail", "exDividendDate"), ("calendarEvents", "exDividendDate"))),
    "dividend_date": ("dividendDate", (("calendarEvents", "dividendDate"),)),
}

PREFERRED_SUFFIXES = tuple(f"-P{letter}" for letter in "ABCDEFGHIJKL")


def _lookup(price_key, fallbacks, quote: dict, summary: dict[str, dict]):
    """Return the first present, non-null raw value: price module, then fallbacks."""
    if price_key is not None and quote.get(price_key) is not None:
        return quote[price_key]
    for module, key in fallbacks:
        value = summary.get(module, {}).get(key)
        if value is not None:
            return value
    return None


def _resolve_number(rule: FieldRule, quote: dict, summary: dict[str, dict]) -> float | None:
    price_key, fallbacks, multiplier = rule
    if price_key is not None:
        value = safe_float(quote.get(price_key))
        if value is not None:
            return round(value * multiplier, 4) if multiplier != 1 else value
    for module, key in fallbacks:
        value = safe_float(summary.get(module, {}).get(key))
        if value is not None:
            return round(value * multiplier, 4) if multiplier != 1 else value
    return None


def _to_datetime(raw: object) -> datetime | None:
    """Yahoo dates arrive as epoch seconds or as formatted strings."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            return datetime.fromtimestamp(raw, UTC).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(raw, str):
        try:
            raw = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if not isinstance(raw, datetime):
        return None
    if raw.tzinfo is not None:
        return raw.astimezone(UTC).replace(tzinfo=None)
    return raw


def _text(*candidates: object) -> str | None:
    for c in candidates:
        if isinstance(c, str) and c.strip():
            return c.strip()
    return None


def build_record(
    symbol: str, quote: dict, summary: dict[str, dict], profile: InstrumentProfile
) -> QuoteRecord:
    """Merge the price module and supplementary statistics into a QuoteRecord.

    Fields missing from both sources keep the instrument kind's defaults
    (zero for numbers).
    """
    values = dict(profile.defaults)
    rules = dict(QUOTE_FIELDS)
    if profile.kind is InstrumentKind.PREFERRED:
        rules.update(PREFERRED_FIELDS)

    for field, rule in rules.items():
        value = _resolve_number(rule, quote, summary)
        if value is None:
            continue
        values[field] = int(value) if field in _INTEGER_FIELDS else value

    profile_data = summary.get("assetProfile", {})
    sector = _text(quote.get("sector"), profile_data.get("sector"))
    if sector:
        values["sector"] = sector
    country = _text(quote.get("country"), profile_data.get("country"))
    if country:
        values["country"] = country

    if profile.kind is InstrumentKind.PREFERRED:
        currency = _text(quote.get("currency"), summary.get("summaryDetail", {}).get("currency"))
        if currency:
            values["currency"] = currency
        exchange = _text(quote.get("exchangeName"), quote.get("exchange"))
        if exchange:
            values["exchange"] = exchange
        for field, (price_key, fallbacks) in _PREFERRED_DATE_FIELDS.items():
            values[field] = _to_datetime(_lookup(price_key, fallbacks, quote, summary))

    name = _text(quote.get("longName"), quote.get("shortName")) or symbol
    return QuoteRecord(symbol=symbol, name=name, **values)


def placeholder_record(symbol: str, profile: InstrumentProfile) -> QuoteRecord:
    """Record written for a symbol whose quote could not be fetched."""
    return QuoteRecord(symbol=symbol, name=symbol, **profile.defaults)


async def _fetch_one(symbol: str, profile: InstrumentProfile) -> QuoteRecord:
    timeout = settings.provider_timeout_seconds
    logger.info("Fetching %s data for %s...", profile.label, symbol)
    try:
        quote = await asyncio.wait_for(fetch_quote(symbol), timeout=timeout)
    except Exception as e:
        logger.error("Error fetching %s data for %s: %s", profile.label, symbol, e)
        return placeholder_record(symbol, profile)

    # Best effort: a missing statistics response only costs the fields it carries
    try:
        summary = await asyncio.wait_for(fetch_quote_summary(symbol), timeout=timeout)
    except Exception as e:
        logger.warning("Limited data available for %s: %s", symbol, e)
        summary = {}

    return build_record(symbol, quote, summary, profile)


async def fetch_quotes(
    symbols: list[str], kind: InstrumentKind | str | None = None
) -> list[QuoteRecord]:
    """Fetch one QuoteRecord per symbol, in input order.

    Symbols are fetched sequentially with a fixed pause after each one to stay
    under Yahoo's rate limits. A symbol whose quote request fails yields a
    placeholder record instead of aborting the batch, so the result always has
    ``len(symbols)`` entries.
    """
    profile = get_profile(kind or settings.instrument_kind)
    records: list[QuoteRecord] = []
    for raw in symbols:
        records.append(await _fetch_one(raw.strip().upper(), profile))
        await asyncio.sleep(settings.fetch_delay_seconds)
    return records


def preferred_variants(company_symbol: str) -> list[str]:
    """Candidate preferred tickers for a company: ``BAC`` -> ``BAC-PA`` .. ``BAC-PL``."""
    company = company_symbol.strip().upper()
    return [f"{company}{suffix}" for suffix in PREFERRED_SUFFIXES]


async def find_preferred_variants(company_symbol: str) -> list[QuoteRecord]:
    """Probe the preferred-series suffixes of a company and fetch the ones that trade.

    A variant counts as listed when Yahoo returns a quote with a price. Probe
    failures just exclude that variant. Returns an empty list when nothing is
    found or the search fails.
    """
    company = company_symbol.strip().upper()
    try:
        listed: list[str] = []
        for variant in preferred_variants(company):
            try:
                quote = await asyncio.wait_for(
                    fetch_quote(variant), timeout=settings.provider_timeout_seconds
                )
                if safe_float(quote.get("regularMarketPrice")) is not None:
                    listed.append(variant)
            except Exception as e:
                logger.debug("No preferred listing for %s: %s", variant, e)
            await asyncio.sleep(settings.probe_delay_seconds)

        if not listed:
            logger.info("No preferred stocks found for %s", company)
            return []
        return await fetch_quotes(listed, InstrumentKind.PREFERRED)
    except Exception:
        logger.exception("Error searching for preferred stocks of %s", company)
        return []
