"""Tests for quote_fetcher: Yahoo payloads -> QuoteRecords, with mocked provider calls."""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest

from stock_insights.instruments import PREFERRED_PROFILE, STOCK_PROFILE, InstrumentKind
from stock_insights.services.quote_fetcher import (
    _to_datetime,
    build_record,
    fetch_quotes,
    find_preferred_variants,
    placeholder_record,
    preferred_variants,
)
from stock_insights.services.yahoo import QuoteNotFoundError
from tests.helpers import make_price_module, make_summary

MODULE = "stock_insights.services.quote_fetcher"


def _quote_by_symbol(quotes: dict[str, dict]):
    async def fake_fetch_quote(symbol):
        if symbol not in quotes:
            raise QuoteNotFoundError(f"Quote not found for ticker symbol: {symbol}")
        return quotes[symbol]
    return fake_fetch_quote


# ---------------------------------------------------------------------------
# build_record
# ---------------------------------------------------------------------------


class TestBuildRecord:
    def test_price_module_and_statistics_merged(self):
        record = build_record("AAPL", make_price_module("AAPL"), make_summary(), STOCK_PROFILE)

        assert record.symbol == "AAPL"
        assert record.name == "AAPL Inc."
        assert record.close == 150.0
        assert record.open == 149.0
        assert record.high == 152.0
        assert record.low == 148.0
        assert record.volume == 50_000_000
        assert record.market_cap == 2_500_000_000_000
        assert record.average_volume == 55_000_000
        assert record.pe_ratio == 28.5
        assert record.beta == 1.25
        assert record.fifty_two_week_high == 199.6
        assert record.fifty_two_week_low == 124.2
        assert record.sector == "Technology"
        assert record.country == "United States"

    def test_fractions_become_percentages(self):
        record = build_record("AAPL", make_price_module("AAPL", change_pct=0.02), make_summary(), STOCK_PROFILE)

        assert record.percent_change == pytest.approx(2.0)
        assert record.dividend_yield == pytest.approx(0.5)

    def test_negative_change(self):
        record = build_record("TSLA", make_price_module("TSLA", change_pct=-0.0345), {}, STOCK_PROFILE)
        assert record.percent_change == pytest.approx(-3.45)

    def test_missing_fields_default_to_zero(self):
        record = build_record("NEW", {"regularMarketPrice": 10.0}, {}, STOCK_PROFILE)

        assert record.name == "NEW"
        assert record.close == 10.0
        assert record.open == 0
        assert record.volume == 0
        assert record.pe_ratio == 0
        assert record.dividend_yield == 0
        assert record.beta == 0
        assert record.sector == ""

    def test_nan_values_ignored(self):
        quote = make_price_module("AAPL", regularMarketOpen=float("nan"))
        record = build_record("AAPL", quote, {}, STOCK_PROFILE)
        assert record.open == 0

    def test_stock_kind_leaves_preferred_fields_empty(self):
        record = build_record("AAPL", make_price_module("AAPL"), make_summary(), STOCK_PROFILE)

        assert record.dividend_rate is None
        assert record.par_value is None
        assert record.currency is None
        assert record.stock_type is None
        assert record.ex_dividend_date is None

    def test_preferred_fields(self):
        quote = make_price_module("BAC-PL", price=1250.0, change_pct=0.001)
        record = build_record("BAC-PL", quote, make_summary(), PREFERRED_PROFILE)

        assert record.dividend_rate == 0.96
        assert record.currency == "USD"
        assert record.exchange == "NasdaqGS"
        assert record.par_value == 25.0
        assert record.stock_type == "Preferred"
        assert record.ex_dividend_date == datetime(2026, 8, 11)
        assert record.dividend_date == datetime(2026, 9, 12)
        # Asset profile sector wins over the kind's default
        assert record.sector == "Technology"

    def test_preferred_defaults_without_statistics(self):
        record = build_record("GS-PA", {"regularMarketPrice": 21.3}, {}, PREFERRED_PROFILE)

        assert record.sector == "Financial"
        assert record.currency == "USD"
        assert record.exchange == ""
        assert record.par_value == 25.0
        assert record.dividend_rate == 0.0
        assert record.dividend_date is None


class TestToDatetime:
    def test_epoch_seconds(self):
        assert _to_datetime(0) == datetime(1970, 1, 1)

    def test_iso_string(self):
        assert _to_datetime("2026-08-11 00:00:00") == datetime(2026, 8, 11)

    def test_aware_string_converted_to_utc(self):
        assert _to_datetime("2026-08-11T02:00:00+02:00") == datetime(2026, 8, 11)

    def test_garbage(self):
        assert _to_datetime("not a date") is None
        assert _to_datetime({"raw": 1}) is None
        assert _to_datetime(None) is None


def test_placeholder_record_is_profile_defaults():
    record = placeholder_record("BADSYM", STOCK_PROFILE)

    assert record.symbol == "BADSYM"
    assert record.name == "BADSYM"
    assert record.close == 0
    assert record.volume == 0
    assert record.sector == ""
    assert record.par_value is None


def test_preferred_placeholder_keeps_preferred_defaults():
    record = placeholder_record("XYZ-PA", PREFERRED_PROFILE)

    assert record.sector == "Financial"
    assert record.par_value == 25.0
    assert record.stock_type == "Preferred"
    assert record.close == 0


# ---------------------------------------------------------------------------
# fetch_quotes
# ---------------------------------------------------------------------------


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_fetch_quotes_single_symbol(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({"AAPL": make_price_module("AAPL", change_pct=0.02)})
    mock_summary.return_value = make_summary()

    records = await fetch_quotes(["AAPL"], InstrumentKind.STOCK)

    assert len(records) == 1
    assert records[0].symbol == "AAPL"
    assert records[0].close == 150.0
    assert records[0].percent_change == pytest.approx(2.0)


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_fetch_quotes_unknown_symbol_gets_placeholder(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({})

    records = await fetch_quotes(["BADSYM"], InstrumentKind.STOCK)

    assert len(records) == 1
    assert records[0].symbol == "BADSYM"
    assert records[0].name == "BADSYM"
    assert records[0].close == 0
    assert records[0].volume == 0
    mock_summary.assert_not_awaited()


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_fetch_quotes_preserves_length_and_order(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({
        "MSFT": make_price_module("MSFT", price=400.0),
        "AAPL": make_price_module("AAPL", price=150.0),
    })
    mock_summary.return_value = {}

    records = await fetch_quotes(["MSFT", "BADSYM", "aapl"], InstrumentKind.STOCK)

    assert [r.symbol for r in records] == ["MSFT", "BADSYM", "AAPL"]
    assert [r.close for r in records] == [400.0, 0, 150.0]


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_fetch_quotes_pauses_after_each_symbol(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({"AAPL": make_price_module("AAPL")})
    mock_summary.return_value = {}

    with patch(f"{MODULE}.settings.fetch_delay_seconds", 1.0):
        await fetch_quotes(["AAPL", "BADSYM"], InstrumentKind.STOCK)

    assert mock_sleep.await_count == 2
    mock_sleep.assert_awaited_with(1.0)


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_fetch_quotes_statistics_failure_keeps_quote(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({"AAPL": make_price_module("AAPL")})
    mock_summary.side_effect = QuoteNotFoundError("no statistics")

    records = await fetch_quotes(["AAPL"], InstrumentKind.STOCK)

    assert records[0].close == 150.0
    assert records[0].pe_ratio == 0
    assert records[0].beta == 0


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_fetch_quotes_preferred_kind(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({})

    records = await fetch_quotes(["BAC-PL"], InstrumentKind.PREFERRED)

    assert records[0].stock_type == "Preferred"
    assert records[0].par_value == 25.0
    assert records[0].sector == "Financial"


async def test_fetch_quotes_empty_input():
    assert await fetch_quotes([], InstrumentKind.STOCK) == []


# ---------------------------------------------------------------------------
# Preferred variants
# ---------------------------------------------------------------------------


def test_preferred_variants_cover_series_a_to_l():
    variants = preferred_variants(" bac ")

    assert len(variants) == 12
    assert variants[0] == "BAC-PA"
    assert variants[-1] == "BAC-PL"


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote_summary", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_find_preferred_variants_returns_listed_series(mock_quote, mock_summary, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({
        "BAC-PB": make_price_module("BAC-PB", price=25.1),
        "BAC-PL": make_price_module("BAC-PL", price=1250.0),
        # Quote without a price doesn't count as listed
        "BAC-PC": {"symbol": "BAC-PC", "regularMarketPrice": None},
    })
    mock_summary.return_value = {}

    records = await find_preferred_variants("bac")

    assert [r.symbol for r in records] == ["BAC-PB", "BAC-PL"]
    assert all(r.stock_type == "Preferred" for r in records)


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_find_preferred_variants_none_listed(mock_quote, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({})

    assert await find_preferred_variants("ZZZZ") == []
    assert mock_quote.await_count == 12


@patch(f"{MODULE}.asyncio.sleep", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quotes", new_callable=AsyncMock)
@patch(f"{MODULE}.fetch_quote", new_callable=AsyncMock)
async def test_find_preferred_variants_failure_returns_empty(mock_quote, mock_fetch_quotes, mock_sleep):
    mock_quote.side_effect = _quote_by_symbol({"BAC-PA": make_price_module("BAC-PA")})
    mock_fetch_quotes.side_effect = RuntimeError("boom")

    assert await find_preferred_variants("BAC") == []
