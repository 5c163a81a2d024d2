"""
Market Aggregator

Ranks the deduplicated universe by change% and builds the near-term
earnings calendar. Pure computation over an already-built snapshot.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from market_digest.schemas.market import (
    EarningsEvent,
    MarketAggregate,
    MarketSnapshot,
    UniverseEntry,
)
from market_digest.services.base import BaseService

logger = logging.getLogger(__name__)


def deduplicate(entries: Iterable[UniverseEntry]) -> list[UniverseEntry]:
    """Keep the first occurrence of each symbol, preserving order."""
    seen: set[str] = set()
    unique = []
    for entry in entries:
        if entry.symbol in seen:
            continue
        seen.add(entry.symbol)
        unique.append(entry)
    return unique


def rank_by_change(entries: Iterable[UniverseEntry]) -> list[UniverseEntry]:
    """
    Sort entries by change% descending.

    Stable: ties keep their input order.
    """
    return sorted(entries, key=lambda e: e.quote.change_percent, reverse=True)


def top_movers(ranking: list[UniverseEntry], count: int = 5) -> list[UniverseEntry]:
    return ranking[:count]


def bottom_movers(ranking: list[UniverseEntry], count: int = 5) -> list[UniverseEntry]:
    """Last `count` entries, worst performer first."""
    if count <= 0:
        return []
    return list(reversed(ranking[-count:]))


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def upcoming_earnings(
    entries: Iterable[UniverseEntry],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> list[EarningsEvent]:
    """
    Earnings events strictly after `now` and at most `window_days` ahead.

    Deduplicated by symbol, sorted by timestamp ascending.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = _as_utc(now)
    horizon = now + timedelta(days=window_days)

    events: dict[str, EarningsEvent] = {}
    for entry in entries:
        ts = entry.quote.earnings_timestamp
        if ts is None or entry.symbol in events:
            continue
        ts = _as_utc(ts)
        if now < ts <= horizon:
            events[entry.symbol] = EarningsEvent(
                symbol=entry.symbol,
                name=entry.name,
                timestamp=ts,
            )

    return sorted(events.values(), key=lambda e: e.timestamp)


class Aggregator(BaseService[MarketSnapshot, MarketAggregate]):
    """Builds rankings and the earnings calendar for a snapshot."""

    def __init__(self, ranking_size: int = 5, earnings_window_days: int = 7):
        self.ranking_size = ranking_size
        self.earnings_window_days = earnings_window_days

    @property
    def name(self) -> str:
        return "Aggregator"

    async def execute(self, input_data: MarketSnapshot) -> MarketAggregate:
        return self.aggregate(input_data)

    def aggregate(
        self, snapshot: MarketSnapshot, now: Optional[datetime] = None
    ) -> MarketAggregate:
        entries = snapshot.all_entries()
        ranking = rank_by_change(deduplicate(entries))

        aggregate = MarketAggregate(
            ranking=ranking,
            top_movers=top_movers(ranking, self.ranking_size),
            bottom_movers=bottom_movers(ranking, self.ranking_size),
            earnings=upcoming_earnings(entries, now, self.earnings_window_days),
        )
        logger.info(
            f"Aggregated {len(entries)} entries -> {len(ranking)} unique, "
            f"{len(aggregate.earnings)} upcoming earnings"
        )
        return aggregate
