"""MarketSnapshotBuilder tests."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import numpy as np
import pytest

from market_digest.schemas.market import BasketKind, QuoteOrigin
from market_digest.services.data_ingestion import (
    MarketSnapshotBuilder,
    QuoteSource,
    SeriesSource,
    Universe,
    select_indicator_targets,
)

INDICES = ["^GSPC", "^DJI", "^IXIC"]
MEGA_CAPS = ["AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA"]


@pytest.fixture
def leaders_universe(member):
    return Universe(
        indices=[member(s, BasketKind.INDEX, "Indices") for s in INDICES],
        mega_caps=[member(s, BasketKind.MEGA_CAP, "Magnificent 7") for s in MEGA_CAPS],
    )


@pytest.fixture
def quote_provider(make_quote):
    """Every symbol quotes; change% varies by symbol."""
    changes = {}

    async def get_quote(symbol):
        changes.setdefault(symbol, float(len(changes)) - 5.0)
        return make_quote(symbol, changes[symbol])

    provider = MagicMock()
    provider.name = "primary"
    provider.get_quote = AsyncMock(side_effect=get_quote)
    return provider


@pytest.fixture
def series_provider():
    provider = MagicMock()
    provider.name = "series"
    provider.get_closes = AsyncMock(return_value=list(np.linspace(100, 130, 60)))
    return provider


def named_provider(name, **methods):
    provider = MagicMock()
    provider.name = name
    for attr, mock in methods.items():
        setattr(provider, attr, mock)
    return provider


def make_builder(quote_provider, series_provider, secondary=None, **kwargs):
    return MarketSnapshotBuilder(
        quote_source=QuoteSource(quote_provider, secondary),
        series_source=SeriesSource(series_provider),
        basket_delay=kwargs.pop("basket_delay", 0),
        series_delay=kwargs.pop("series_delay", 0),
        **kwargs,
    )


class TestMarketSnapshotBuilder:
    @pytest.mark.asyncio
    async def test_indices_and_mega_caps(self, leaders_universe, quote_provider, series_provider):
        builder = make_builder(quote_provider, series_provider)

        snapshot = await builder.execute(leaders_universe)

        assert [e.symbol for e in snapshot.indices] == INDICES
        assert [e.symbol for e in snapshot.mega_caps] == MEGA_CAPS
        assert snapshot.quote_count == 10
        assert all(e.indicators is not None for e in snapshot.all_entries())

        fetched = {c.args[0] for c in series_provider.get_closes.await_args_list}
        assert fetched == set(INDICES + MEGA_CAPS)
        assert series_provider.get_closes.await_count == 10

    @pytest.mark.asyncio
    async def test_missing_quotes_are_dropped(self, member, make_quote, series_provider):
        async def get_quote(symbol):
            return None if symbol == "BAD" else make_quote(symbol, 1.0)

        provider = named_provider("primary", get_quote=AsyncMock(side_effect=get_quote))
        universe = Universe(
            sector_baskets={"Tech": [member("GOOD", basket_name="Tech"), member("BAD", basket_name="Tech")]}
        )

        snapshot = await make_builder(provider, series_provider).execute(universe)

        assert [e.symbol for e in snapshot.sectors[0].entries] == ["GOOD"]
        assert all(e.quote is not None for e in snapshot.all_entries())

    @pytest.mark.asyncio
    async def test_overlapping_symbol_fetched_once(self, member, quote_provider, series_provider):
        universe = Universe(
            mega_caps=[member("NVDA", BasketKind.MEGA_CAP, "Magnificent 7")],
            sector_baskets={
                "Semiconductors": [
                    member("NVDA", basket_name="Semiconductors"),
                    member("AMD", basket_name="Semiconductors"),
                ]
            },
        )

        snapshot = await make_builder(quote_provider, series_provider).execute(universe)

        symbols = [c.args[0] for c in quote_provider.get_quote.await_args_list]
        assert symbols.count("NVDA") == 1
        assert [e.symbol for e in snapshot.all_entries()] == ["NVDA", "NVDA", "AMD"]

    @pytest.mark.asyncio
    async def test_empty_snapshot_skips_series(self, leaders_universe, series_provider):
        provider = named_provider("primary", get_quote=AsyncMock(return_value=None))

        snapshot = await make_builder(provider, series_provider).execute(leaders_universe)

        assert snapshot.is_empty
        series_provider.get_closes.assert_not_called()

    @pytest.mark.asyncio
    async def test_secondary_only(self, leaders_universe, make_quote, series_provider):
        primary = named_provider("primary", get_quote=AsyncMock(side_effect=RuntimeError("primary down")))

        async def secondary_quote(symbol):
            return make_quote(symbol, 0.5, source=QuoteOrigin.SECONDARY)

        secondary = named_provider("secondary", get_quote=AsyncMock(side_effect=secondary_quote))

        snapshot = await make_builder(primary, series_provider, secondary).execute(leaders_universe)

        assert snapshot.quote_count == 10
        assert all(e.quote.source == QuoteOrigin.SECONDARY for e in snapshot.all_entries())

    @pytest.mark.asyncio
    async def test_pacing_between_baskets_only(self, member, quote_provider, series_provider):
        universe = Universe(
            sector_baskets={
                name: [member(f"{name}{i}", basket_name=name) for i in range(3)]
                for name in ("A", "B", "C")
            }
        )
        builder = make_builder(quote_provider, series_provider, basket_delay=1.0)

        with patch(
            "market_digest.services.data_ingestion.snapshot_builder.asyncio.sleep",
            new=AsyncMock(),
        ) as sleep:
            await builder.execute(universe)

        assert sleep.await_args_list == [call(1.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_series_fetched_one_at_a_time(self, leaders_universe, quote_provider):
        events = []

        async def get_closes(symbol, lookback_days):
            events.append(symbol)
            return list(np.linspace(100, 130, 60))

        async def record_sleep(delay):
            events.append("sleep")

        series = named_provider("series", get_closes=AsyncMock(side_effect=get_closes))
        builder = make_builder(quote_provider, series, series_delay=0.3)

        with patch(
            "market_digest.services.data_ingestion.snapshot_builder.asyncio.sleep",
            new=AsyncMock(side_effect=record_sleep),
        ) as sleep:
            await builder.execute(leaders_universe)

        targets = series.get_closes.await_count
        assert targets == 10
        assert sleep.await_args_list == [call(0.3)] * (targets - 1)
        assert events[1::2] == ["sleep"] * (targets - 1)
        assert events[0::2] == INDICES + MEGA_CAPS


class TestIndicatorTargets:
    def test_union_of_leaders_and_movers(self, make_snapshot):
        rows = [(f"S{i}", float(i)) for i in range(10)]
        snapshot = make_snapshot(
            sectors={"Mixed": rows},
            indices=[("^GSPC", 4.5)],
            mega_caps=[("AAPL", 5.5)],
        )

        targets = select_indicator_targets(snapshot, mover_count=2)

        assert targets[:2] == ["^GSPC", "AAPL"]
        assert set(targets[2:]) == {"S9", "S8", "S0", "S1"}

    def test_no_repeats(self, make_snapshot):
        snapshot = make_snapshot(
            sectors={"Tech": [("AAPL", 3.0)]},
            mega_caps=[("AAPL", 3.0)],
        )
        assert select_indicator_targets(snapshot, mover_count=10) == ["AAPL"]
