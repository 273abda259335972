"""Yahoo Finance single-symbol quote and statistics fetching via yahooquery."""

import logging

from yahooquery import Ticker

from stock_insights.utils import async_threadable

logger = logging.getLogger(__name__)

# quoteSummary modules used to fill fields the price module lacks
SUMMARY_MODULES = ["summaryDetail", "defaultKeyStatistics", "assetProfile", "calendarEvents"]


class QuoteNotFoundError(LookupError):
    """Yahoo returned no usable data for a symbol."""


def _is_invalid_crumb(data: object, symbol: str) -> bool:
    """Check if Yahoo rejected the session crumb instead of answering."""
    if isinstance(data, str):
        return "Invalid Crumb" in data
    if isinstance(data, dict):
        value = data.get(symbol)
        return isinstance(value, str) and "Invalid Crumb" in value
    return False


def _symbol_payload(data: object, symbol: str, what: str) -> dict:
    """Pick the dict for ``symbol`` out of a yahooquery response.

    yahooquery reports errors as strings (either for the whole response or
    per symbol) rather than raising, so anything but a non-empty dict is
    turned into a QuoteNotFoundError here.
    """
    if not isinstance(data, dict):
        raise QuoteNotFoundError(f"Yahoo returned no {what} for {symbol}: {repr(data)[:200]}")
    info = data.get(symbol)
    if not isinstance(info, dict) or not info:
        raise QuoteNotFoundError(f"Yahoo returned no {what} for {symbol}: {repr(info)[:200]}")
    return info


def _fetch_with_crumb_retry(symbol: str, getter) -> object:
    data = getter(Ticker(symbol))
    # Retry once with a fresh session if Yahoo rejected the crumb
    if _is_invalid_crumb(data, symbol):
        logger.warning("Yahoo rejected crumb for %s, retrying with fresh session", symbol)
        data = getter(Ticker(symbol))
    return data


@async_threadable
def fetch_quote(symbol: str) -> dict:
    """Fetch the Yahoo ``price`` module for one symbol.

    The returned dict carries keys such as regularMarketPrice,
    regularMarketChangePercent (a fraction), regularMarketVolume, marketCap,
    longName/shortName, currency and exchangeName.
    Raises QuoteNotFoundError when Yahoo has no quote for the symbol.
    """
    data = _fetch_with_crumb_retry(symbol, lambda t: t.price)
    return _symbol_payload(data, symbol, "quote")


@async_threadable
def fetch_quote_summary(symbol: str) -> dict[str, dict]:
    """Fetch supplementary statistics for one symbol.

    Returns {module_name: module_dict} for each of SUMMARY_MODULES that Yahoo
    answered; modules that came back as error strings are left out.
    Raises QuoteNotFoundError when nothing at all is available.
    """
    data = _fetch_with_crumb_retry(symbol, lambda t: t.get_modules(SUMMARY_MODULES))
    info = _symbol_payload(data, symbol, "statistics")
    return {
        module: info[module]
        for module in SUMMARY_MODULES
        if isinstance(info.get(module), dict)
    }
