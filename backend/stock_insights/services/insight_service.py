"""Gemini commentary for quote records, batched to respect rate limits."""

import asyncio
import logging

from google import genai

from stock_insights.config import settings
from stock_insights.schemas.stock import QuoteRecord

logger = logging.getLogger(__name__)

UNAVAILABLE_INSIGHT = "AI insights temporarily unavailable"
FAILED_ANALYSIS = "Analysis unavailable"

_client: genai.Client | None = None


def get_client() -> genai.Client:
    """Return the shared Gemini client, creating it on first use."""
    global _client
    if _client is None:
        if not settings.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is not configured")
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def build_prompt(record: QuoteRecord) -> str:
    return (
        "Analyze this stock data and provide a brief insight (max 100 words):\n"
        "\n"
        f"Stock: {record.symbol} ({record.name})\n"
        f"Current Price: ${record.close}\n"
        f"Change: {record.percent_change}%\n"
        f"Volume: {record.volume}\n"
        f"P/E Ratio: {record.pe_ratio}\n"
        f"Market Cap: {record.market_cap}\n"
        "\n"
        "Provide a concise analysis focusing on:\n"
        "1. Current performance\n"
        "2. Key metrics interpretation\n"
        "3. Brief outlook (neutral tone)\n"
    )


async def generate_insight(record: QuoteRecord) -> str:
    """Ask Gemini for a short commentary on one record.

    Never raises: any provider problem (missing key, timeout, API error,
    empty answer) yields UNAVAILABLE_INSIGHT.
    """
    try:
        response = await asyncio.wait_for(
            get_client().aio.models.generate_content(
                model=settings.gemini_model,
                contents=build_prompt(record),
            ),
            timeout=settings.provider_timeout_seconds,
        )
        text = (response.text or "").strip()
        if not text:
            raise ValueError("Gemini returned an empty response")
        return text
    except Exception as e:
        logger.error("Gemini API error for %s: %s", record.symbol, e)
        return UNAVAILABLE_INSIGHT


async def _analyze(record: QuoteRecord) -> tuple[str, str]:
    try:
        return record.symbol, await generate_insight(record)
    except Exception:
        logger.exception("Error analyzing %s", record.symbol)
        return record.symbol, FAILED_ANALYSIS


def _chunks(items: list, n: int):
    for i in range(0, len(items), n):
        yield items[i : i + n]


async def batch_analyze(records: list[QuoteRecord]) -> dict[str, str]:
    """Generate commentary for every record. Returns {symbol: text}.

    Records are processed in batches of ``insight_batch_size``: requests
    within a batch run concurrently, and consecutive batches are separated
    by ``insight_batch_delay_seconds``. With duplicate symbols the later
    record's text wins.
    """
    insights: dict[str, str] = {}
    batches = list(_chunks(list(records), max(1, settings.insight_batch_size)))

    for index, batch in enumerate(batches):
        results = await asyncio.gather(*(_analyze(record) for record in batch))
        for symbol, text in results:
            insights[symbol] = text

        if index < len(batches) - 1:
            await asyncio.sleep(settings.insight_batch_delay_seconds)

    return insights
