"""
Aggregation Service

CONTRACT:
    Input:  MarketSnapshot
    Output: MarketAggregate (ranking, top/bottom movers, earnings calendar)
"""

from market_digest.services.aggregation.aggregator import (
    Aggregator,
    deduplicate,
    rank_by_change,
    top_movers,
    bottom_movers,
    upcoming_earnings,
)

__all__ = [
    "Aggregator",
    "deduplicate",
    "rank_by_change",
    "top_movers",
    "bottom_movers",
    "upcoming_earnings",
]
