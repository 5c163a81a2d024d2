"""
Market Digest Schema Contracts

Data passed between the acquisition, aggregation, generation and
delivery layers.
"""

from market_digest.schemas.market import (
    QuoteOrigin,
    BasketKind,
    RsiFlag,
    Quote,
    IndicatorBundle,
    UniverseMember,
    UniverseEntry,
    SectorBasket,
    MarketSnapshot,
    EarningsEvent,
    MarketAggregate,
)
from market_digest.schemas.report import RunResult, RunStatus, RunTrigger

__all__ = [
    # Market
    "QuoteOrigin",
    "BasketKind",
    "RsiFlag",
    "Quote",
    "IndicatorBundle",
    "UniverseMember",
    "UniverseEntry",
    "SectorBasket",
    "MarketSnapshot",
    "EarningsEvent",
    "MarketAggregate",
    # Report
    "RunResult",
    "RunStatus",
    "RunTrigger",
]
