"""Refresh cycle: fetch quotes -> generate insights -> upsert by symbol."""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stock_insights.config import settings
from stock_insights.database import async_session
from stock_insights.instruments import InstrumentKind, get_profile, normalize_symbols
from stock_insights.repositories.stock_repo import StockRepository
from stock_insights.services.insight_service import batch_analyze
from stock_insights.services.quote_fetcher import fetch_quotes
from stock_insights.utils import utcnow

logger = logging.getLogger(__name__)


class StockRefresher:
    """Owns the tracked symbol set and runs refresh cycles against the store.

    A cycle goes Fetching -> Enriching -> Persisting. Any failure ends the
    cycle where it happened: symbols already upserted keep their new
    snapshot, the rest keep their previous one. Only one cycle runs at a
    time; a trigger that fires while a cycle is in progress is skipped.
    """

    def __init__(
        self,
        kind: InstrumentKind | str,
        symbols: list[str] | None = None,
        session_factory: async_sessionmaker[AsyncSession] = async_session,
    ):
        self.profile = get_profile(kind)
        self._symbols = normalize_symbols(symbols or self.profile.default_symbols)
        self._session_factory = session_factory
        self._lock = asyncio.Lock()

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def add_symbol(self, symbol: str) -> bool:
        """Track another symbol from the next cycle on. Returns False if already tracked."""
        sym = symbol.strip().upper()
        if not sym:
            raise ValueError("Symbol must not be empty")
        if sym in self._symbols:
            return False
        self._symbols.append(sym)
        logger.info("Now tracking %s (%d symbols)", sym, len(self._symbols))
        return True

    async def run_cycle(self) -> bool:
        """Run one refresh cycle. Never raises; returns True when every record was written."""
        if self._lock.locked():
            logger.warning("Skipping %s refresh: previous cycle still running", self.profile.label)
            return False
        async with self._lock:
            return await self._run_cycle()

    async def _run_cycle(self) -> bool:
        label = self.profile.label
        symbols = self.symbols
        try:
            logger.info("Starting %s data update for %d symbols...", label, len(symbols))
            records = await fetch_quotes(symbols, self.profile.kind)
            logger.info("Fetched data for %d %s", len(records), label)

            insights = await batch_analyze(records)

            now = utcnow()
            async with self._session_factory() as db:
                repo = StockRepository(db)
                for record in records:
                    await repo.upsert(
                        record,
                        ai_insights=insights.get(record.symbol, ""),
                        last_updated=now,
                    )

            logger.info("%s data updated successfully", label.capitalize())
            return True
        except Exception:
            logger.exception("Error updating %s data", label)
            return False


_instance: StockRefresher | None = None


def init_refresher(
    session_factory: async_sessionmaker[AsyncSession] = async_session,
) -> StockRefresher:
    """Create the process-wide refresher from settings (called once at startup)."""
    global _instance
    _instance = StockRefresher(
        settings.instrument_kind,
        settings.tracked_symbols,
        session_factory=session_factory,
    )
    return _instance


def get_refresher() -> StockRefresher:
    """Return the process-wide refresher.

    Raises RuntimeError if init_refresher() hasn't been called yet.
    """
    if _instance is None:
        raise RuntimeError("Refresher not initialized, call init_refresher() first")
    return _instance
