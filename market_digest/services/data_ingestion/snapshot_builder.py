"""
Market Snapshot Builder

Populates every UniverseEntry for one run.

Fetch order:
1. Indices + mega-caps in one concurrent fan-out
2. Sector baskets one at a time, members concurrently, with a pacing
   delay between baskets
3. Close series for the indicator target set, sequentially with a
   lighter per-call delay
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from market_digest.schemas.market import (
    BasketKind,
    IndicatorBundle,
    MarketSnapshot,
    Quote,
    SectorBasket,
    UniverseEntry,
    UniverseMember,
)
from market_digest.services.base import BaseService
from market_digest.services.data_ingestion.quote_source import QuoteSource
from market_digest.services.data_ingestion.series_source import (
    SeriesSource,
    DEFAULT_LOOKBACK_DAYS,
)
from market_digest.services.data_ingestion.universe import Universe
from market_digest.services.indicators import compute_indicator_bundle

logger = logging.getLogger(__name__)


def select_indicator_targets(snapshot: MarketSnapshot, mover_count: int = 10) -> list[str]:
    """
    Symbols that get historical-series indicators.

    Union of all indices, all mega-caps and the `mover_count` highest and
    lowest change% entries, in that order without repeats.
    """
    targets: list[str] = []
    seen: set[str] = set()

    def add(symbol: str) -> None:
        if symbol not in seen:
            seen.add(symbol)
            targets.append(symbol)

    for entry in snapshot.indices + snapshot.mega_caps:
        add(entry.symbol)

    unique: dict[str, UniverseEntry] = {}
    for entry in snapshot.all_entries():
        unique.setdefault(entry.symbol, entry)
    ranked = sorted(unique.values(), key=lambda e: e.quote.change_percent, reverse=True)

    if mover_count > 0:
        for entry in ranked[:mover_count]:
            add(entry.symbol)
        for entry in ranked[-mover_count:]:
            add(entry.symbol)

    return targets


class MarketSnapshotBuilder(BaseService[Universe, MarketSnapshot]):
    """
    Market Snapshot Builder.

    Entries whose quote could not be fetched are dropped. Symbols that
    appear in several baskets are fetched once per run.
    """

    def __init__(
        self,
        quote_source: QuoteSource,
        series_source: SeriesSource,
        basket_delay: float = 1.0,
        series_delay: float = 0.3,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        mover_count: int = 10,
    ):
        self.quote_source = quote_source
        self.series_source = series_source
        self.basket_delay = basket_delay
        self.series_delay = series_delay
        self.lookback_days = lookback_days
        self.mover_count = mover_count

    @property
    def name(self) -> str:
        return "MarketSnapshotBuilder"

    async def execute(self, input_data: Universe) -> MarketSnapshot:
        """Fetch quotes for the whole universe, then indicators for the target set."""
        start_time = datetime.now()
        quote_cache: dict[str, Optional[Quote]] = {}

        # Indices and mega-caps: small fixed set, no pacing
        leaders = input_data.indices + input_data.mega_caps
        leader_entries = await self._fetch_group(leaders, quote_cache)
        indices = [e for e in leader_entries if e.basket == BasketKind.INDEX]
        mega_caps = [e for e in leader_entries if e.basket == BasketKind.MEGA_CAP]

        # Sector baskets: paced basket by basket
        sectors: list[SectorBasket] = []
        for i, (basket_name, members) in enumerate(input_data.sector_baskets.items()):
            if i > 0 and self.basket_delay > 0:
                await asyncio.sleep(self.basket_delay)
            entries = await self._fetch_group(members, quote_cache)
            sectors.append(SectorBasket(name=basket_name, entries=entries))
            logger.info(f"Basket {basket_name}: {len(entries)}/{len(members)} quotes")

        snapshot = MarketSnapshot(
            timestamp=datetime.now(timezone.utc),
            indices=indices,
            mega_caps=mega_caps,
            sectors=sectors,
        )

        if snapshot.is_empty:
            logger.error("No quotes fetched for any symbol; skipping indicators")
            return snapshot

        bundles = await self._fetch_indicators(
            select_indicator_targets(snapshot, self.mover_count)
        )
        for entry in snapshot.all_entries():
            entry.indicators = bundles.get(entry.symbol)

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Snapshot built: {snapshot.quote_count}/{input_data.size} entries, "
            f"{len(bundles)} indicator bundles in {elapsed:.1f}s"
        )
        return snapshot

    async def _fetch_group(
        self,
        members: list[UniverseMember],
        quote_cache: dict[str, Optional[Quote]],
    ) -> list[UniverseEntry]:
        """Fetch all members concurrently; one result slot per member."""
        pending = [m.symbol for m in members if m.symbol not in quote_cache]
        pending = list(dict.fromkeys(pending))

        results = await asyncio.gather(
            *(self.quote_source.fetch_quote(symbol) for symbol in pending)
        )
        quote_cache.update(zip(pending, results))

        entries = []
        for member in members:
            quote = quote_cache.get(member.symbol)
            if quote is None:
                continue
            entries.append(UniverseEntry.from_member(member, quote))
        return entries

    async def _fetch_indicators(self, symbols: list[str]) -> dict[str, IndicatorBundle]:
        """Fetch series sequentially and compute bundles."""
        bundles: dict[str, IndicatorBundle] = {}

        for i, symbol in enumerate(symbols):
            if i > 0 and self.series_delay > 0:
                await asyncio.sleep(self.series_delay)

            closes = await self.series_source.fetch_closes(symbol, self.lookback_days)
            if closes is None:
                continue

            bundle = compute_indicator_bundle(closes)
            if bundle is not None:
                bundles[symbol] = bundle

        return bundles
