from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stock_insights.models import Stock
from stock_insights.schemas.stock import QuoteRecord

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class StockRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_symbol(self, symbol: str) -> Stock | None:
        result = await self.db.execute(
            select(Stock)
            .where(Stock.symbol == symbol.upper())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Stock]:
        """Return every record, most recently refreshed first."""
        result = await self.db.execute(
            select(Stock).order_by(Stock.last_updated.desc(), Stock.symbol)
        )
        return list(result.scalars().all())

    async def upsert(
        self, record: QuoteRecord, *, ai_insights: str, last_updated: datetime
    ) -> Stock:
        """Insert the record, or overwrite every field of the existing row for its symbol.

        A single INSERT ... ON CONFLICT statement, so concurrent writers of the
        same symbol (API process and worker) end with the last write instead of
        a unique-index violation. Commits immediately.
        """
        values = record.model_dump()
        values["symbol"] = record.symbol.upper()
        values["ai_insights"] = ai_insights
        values["last_updated"] = last_updated

        insert = _INSERTS[self.db.get_bind().dialect.name]
        stmt = insert(Stock).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["symbol"],
            set_={
                **{key: stmt.excluded[key] for key in values if key != "symbol"},
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)
        await self.db.commit()
        return await self.find_by_symbol(values["symbol"])
