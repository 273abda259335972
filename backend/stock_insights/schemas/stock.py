import datetime

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

# Python attributes stay snake_case (matching the ORM columns); JSON uses camelCase.
_CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "from_attributes": True,
}


class QuoteRecord(BaseModel):
    """One normalized quote snapshot, as produced by the quote fetcher."""

    symbol: str = Field(description="Uppercase ticker symbol (e.g. AAPL, BAC-PL)")
    name: str = Field(description="Display name; equals the symbol when Yahoo could not resolve it")
    open: float = Field(default=0, description="Session open price")
    high: float = Field(default=0, description="Session high")
    low: float = Field(default=0, description="Session low")
    close: float = Field(default=0, description="Latest traded price")
    volume: int = Field(default=0, description="Session trading volume")
    market_cap: int = Field(default=0, description="Market capitalisation")
    pe_ratio: float = Field(default=0, description="Trailing P/E ratio")
    dividend_yield: float = Field(default=0, description="Dividend yield in percent (2.5 = 2.5%)")
    percent_change: float = Field(default=0, description="Change from previous close in percent")
    fifty_two_week_high: float = Field(default=0, description="52-week high")
    fifty_two_week_low: float = Field(default=0, description="52-week low")
    average_volume: int = Field(default=0, description="Average daily volume")
    beta: float = Field(default=0, description="Beta versus the market")
    sector: str = Field(default="", description="Sector, empty when unknown")
    country: str = Field(default="", description="Country of the issuer, empty when unknown")

    dividend_rate: float | None = Field(default=None, description="Annual dividend per share (preferred only)")
    currency: str | None = Field(default=None, description="Quote currency (preferred only)")
    exchange: str | None = Field(default=None, description="Listing exchange (preferred only)")
    par_value: float | None = Field(default=None, description="Par value, usually 25 (preferred only)")
    ex_dividend_date: datetime.datetime | None = Field(default=None, description="Next/last ex-dividend date (preferred only)")
    dividend_date: datetime.datetime | None = Field(default=None, description="Next/last dividend payment date (preferred only)")
    stock_type: str | None = Field(default=None, description="'Preferred' for preferred stocks")

    model_config = _CAMEL_CONFIG


class StockResponse(QuoteRecord):
    ai_insights: str = Field(default="", description="Gemini commentary, empty until the first successful refresh")
    last_updated: datetime.datetime | None = Field(default=None, description="Time of the last refresh that wrote this record")


class StockListResponse(BaseModel):
    success: bool = True
    data: list[StockResponse] = Field(description="All stored records, most recently refreshed first")
    last_updated: datetime.datetime | None = Field(default=None, description="Refresh time of the newest record")
    count: int = Field(description="Number of records")
    type: str = Field(description="Instrument kind label: 'stocks' or 'preferred-stocks'")

    model_config = _CAMEL_CONFIG


class StockDetailResponse(BaseModel):
    success: bool = True
    data: StockResponse

    model_config = _CAMEL_CONFIG


class CompanyPreferredResponse(BaseModel):
    success: bool = True
    data: list[QuoteRecord] = Field(description="Freshly fetched preferred issues of the company")
    company: str = Field(description="Uppercased company ticker that was searched")
    count: int

    model_config = _CAMEL_CONFIG


class TrackedSymbolCreate(BaseModel):
    symbol: str = Field(min_length=1, max_length=20, description="Ticker to add to the refresh set")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be blank")
        return v


class TrackedSymbolsResponse(BaseModel):
    success: bool = True
    data: list[str] = Field(description="Symbols refreshed by each cycle, in refresh order")
    count: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str | None = None
