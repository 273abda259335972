"""Instrument kinds and the per-kind defaults used by fetching and the API."""

import enum
from dataclasses import dataclass, field
from typing import Any


class InstrumentKind(str, enum.Enum):
    STOCK = "stock"
    PREFERRED = "preferred"


@dataclass(frozen=True)
class InstrumentProfile:
    """Everything that differs between ordinary and preferred stocks.

    ``defaults`` holds the field values a record starts from before any
    provider data is applied. A placeholder record (failed fetch) is exactly
    these defaults plus ``symbol``/``name`` set to the ticker.
    """

    kind: InstrumentKind
    label: str  # "stocks" / "preferred-stocks", used in API payloads and logs
    service_name: str
    not_found_message: str
    default_symbols: tuple[str, ...]
    defaults: dict[str, Any] = field(default_factory=dict)


STOCK_PROFILE = InstrumentProfile(
    kind=InstrumentKind.STOCK,
    label="stocks",
    service_name="Stock API",
    not_found_message="Stock not found",
    default_symbols=("AAPL", "GOOGL", "MSFT", "TSLA", "AMZN", "META", "NVDA", "NFLX"),
    defaults={"sector": "", "country": ""},
)

PREFERRED_PROFILE = InstrumentProfile(
    kind=InstrumentKind.PREFERRED,
    label="preferred-stocks",
    service_name="Preferred Stock API",
    not_found_message="Preferred stock not found",
    default_symbols=(
        "BAC-PL",  # Bank of America Series L
        "JPM-PC",  # JPMorgan Chase Series C
        "WFC-PL",  # Wells Fargo Series L
        "C-PN",  # Citigroup Series N
        "GS-PA",  # Goldman Sachs Series A
        "MS-PA",  # Morgan Stanley Series A
        "USB-PA",  # U.S. Bancorp Series A
        "PNC-PP",  # PNC Financial Series P
        "TFC-PO",  # Truist Financial Series O
        "KEY-PJ",  # KeyCorp Series J
    ),
    # Preferred issues are overwhelmingly bank paper with a $25 par value
    defaults={
        "sector": "Financial",
        "country": "",
        "dividend_rate": 0.0,
        "currency": "USD",
        "exchange": "",
        "par_value": 25.0,
        "ex_dividend_date": None,
        "dividend_date": None,
        "stock_type": "Preferred",
    },
)

_PROFILES: dict[InstrumentKind, InstrumentProfile] = {
    InstrumentKind.STOCK: STOCK_PROFILE,
    InstrumentKind.PREFERRED: PREFERRED_PROFILE,
}


def get_profile(kind: InstrumentKind | str) -> InstrumentProfile:
    """Resolve an instrument kind (enum or its string value) to its profile."""
    return _PROFILES[InstrumentKind(kind)]


def normalize_symbols(symbols) -> list[str]:
    """Uppercase and strip symbols, dropping blanks and duplicates (first wins)."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in symbols:
        sym = raw.strip().upper()
        if sym and sym not in seen:
            seen.add(sym)
            result.append(sym)
    return result
