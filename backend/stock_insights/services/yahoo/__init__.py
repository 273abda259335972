"""Yahoo Finance data fetching via yahooquery.

- quotes: per-symbol price module and supplementary statistics

Public functions are re-exported here so consumers can use:
    from stock_insights.services.yahoo import <name>
"""

from stock_insights.services.yahoo.quotes import (
    SUMMARY_MODULES,
    QuoteNotFoundError,
    fetch_quote,
    fetch_quote_summary,
)

__all__ = [
    "SUMMARY_MODULES",
    "QuoteNotFoundError",
    "fetch_quote",
    "fetch_quote_summary",
]
