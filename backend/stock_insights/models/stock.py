from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from stock_insights.database import Base


class Stock(Base):
    """Latest quote snapshot for one symbol, overwritten on every refresh."""

    __tablename__ = "stocks"

    id: Mapped[int] = mapped_column(primary_key=True)
    symbol: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))

    open: Mapped[float] = mapped_column(Float, default=0)
    high: Mapped[float] = mapped_column(Float, default=0)
    low: Mapped[float] = mapped_column(Float, default=0)
    close: Mapped[float] = mapped_column(Float, default=0)
    volume: Mapped[int] = mapped_column(BigInteger, default=0)
    market_cap: Mapped[int] = mapped_column(BigInteger, default=0)
    pe_ratio: Mapped[float] = mapped_column(Float, default=0)
    dividend_yield: Mapped[float] = mapped_column(Float, default=0)
    percent_change: Mapped[float] = mapped_column(Float, default=0)
    fifty_two_week_high: Mapped[float] = mapped_column(Float, default=0)
    fifty_two_week_low: Mapped[float] = mapped_column(Float, default=0)
    average_volume: Mapped[int] = mapped_column(BigInteger, default=0)
    beta: Mapped[float] = mapped_column(Float, default=0)
    sector: Mapped[str] = mapped_column(String(100), default="")
    country: Mapped[str] = mapped_column(String(100), default="")

    # Preferred-stock fields, NULL for ordinary stocks
    dividend_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str | None] = mapped_column(String(10), nullable=True)
    exchange: Mapped[str | None] = mapped_column(String(100), nullable=True)
    par_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    ex_dividend_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    dividend_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    stock_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    ai_insights: Mapped[str] = mapped_column(Text, default="")
    last_updated: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())
