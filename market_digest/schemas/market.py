"""
Market Data Schemas

Quote, indicator and universe models shared by the acquisition,
aggregation and reporting layers. All models are rebuilt each run;
nothing here is persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class QuoteOrigin(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class BasketKind(str, Enum):
    INDEX = "index"
    MEGA_CAP = "mega_cap"
    SECTOR = "sector"


class RsiFlag(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"


# =============================================================================
# QUOTES & INDICATORS
# =============================================================================


class Quote(BaseModel):
    """
    Current quote for a single symbol.

    Only constructed for valid quotes (non-zero price). Fields the
    secondary provider does not report stay None.
    """

    symbol: str
    price: float = Field(..., gt=0)
    change: float
    change_percent: float
    previous_close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[int] = None
    average_volume: Optional[int] = None
    market_cap: Optional[float] = None
    fifty_two_week_high: Optional[float] = None
    fifty_two_week_low: Optional[float] = None
    earnings_timestamp: Optional[datetime] = None
    source: QuoteOrigin = QuoteOrigin.PRIMARY


class IndicatorBundle(BaseModel):
    """Technical indicators derived from a daily close series."""

    rsi14: Optional[float] = Field(default=None, ge=0, le=100)
    rsi_flag: Optional[RsiFlag] = None
    ma20: Optional[float] = None
    ma50: Optional[float] = None
    ma20_percent_offset: Optional[float] = None
    ma50_percent_offset: Optional[float] = None
    bollinger_percent: Optional[float] = None  # 0 = lower band, 100 = upper band


# =============================================================================
# UNIVERSE
# =============================================================================


class UniverseMember(BaseModel):
    """Static universe row: one symbol in one basket."""

    symbol: str
    name: str
    sector: str
    basket: BasketKind
    basket_name: str


class UniverseEntry(BaseModel):
    """A universe member with the data fetched for it this run."""

    symbol: str
    name: str
    sector: str
    basket: BasketKind
    basket_name: str
    quote: Quote
    indicators: Optional[IndicatorBundle] = None

    @classmethod
    def from_member(cls, member: UniverseMember, quote: Quote) -> "UniverseEntry":
        return cls(
            symbol=member.symbol,
            name=member.name,
            sector=member.sector,
            basket=member.basket,
            basket_name=member.basket_name,
            quote=quote,
        )


class SectorBasket(BaseModel):
    """Entries of one sector basket, in table order."""

    name: str
    entries: list[UniverseEntry] = Field(default_factory=list)

    @property
    def average_change_percent(self) -> Optional[float]:
        if not self.entries:
            return None
        return sum(e.quote.change_percent for e in self.entries) / len(self.entries)


class MarketSnapshot(BaseModel):
    """All entries populated for one run."""

    timestamp: datetime
    indices: list[UniverseEntry] = Field(default_factory=list)
    mega_caps: list[UniverseEntry] = Field(default_factory=list)
    sectors: list[SectorBasket] = Field(default_factory=list)

    def all_entries(self) -> list[UniverseEntry]:
        """Indices, mega-caps, then sectors in order. May contain duplicates."""
        entries = list(self.indices) + list(self.mega_caps)
        for basket in self.sectors:
            entries.extend(basket.entries)
        return entries

    @property
    def quote_count(self) -> int:
        return len(self.all_entries())

    @property
    def is_empty(self) -> bool:
        return self.quote_count == 0


# =============================================================================
# AGGREGATES
# =============================================================================


class EarningsEvent(BaseModel):
    """Upcoming earnings report within the calendar window."""

    symbol: str
    name: str
    timestamp: datetime


class MarketAggregate(BaseModel):
    """Rankings and calendar derived from a snapshot."""

    ranking: list[UniverseEntry] = Field(default_factory=list)
    top_movers: list[UniverseEntry] = Field(default_factory=list)
    bottom_movers: list[UniverseEntry] = Field(default_factory=list)
    earnings: list[EarningsEvent] = Field(default_factory=list)
