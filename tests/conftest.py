"""Shared factories for market data test objects."""

from datetime import datetime, timezone

import pytest

from market_digest.schemas.market import (
    BasketKind,
    MarketSnapshot,
    Quote,
    QuoteOrigin,
    SectorBasket,
    UniverseEntry,
    UniverseMember,
)


@pytest.fixture
def make_quote():
    def _make(symbol, change_percent=0.0, price=100.0, **kwargs):
        previous_close = price / (1 + change_percent / 100)
        fields = {
            "symbol": symbol,
            "price": price,
            "change": price - previous_close,
            "change_percent": change_percent,
            "previous_close": previous_close,
            "source": QuoteOrigin.PRIMARY,
        }
        fields.update(kwargs)
        return Quote(**fields)

    return _make


@pytest.fixture
def make_entry(make_quote):
    def _make(
        symbol,
        change_percent=0.0,
        basket=BasketKind.SECTOR,
        basket_name="Test Basket",
        **quote_kwargs,
    ):
        member = UniverseMember(
            symbol=symbol,
            name=f"{symbol} Inc",
            sector="Test",
            basket=basket,
            basket_name=basket_name,
        )
        return UniverseEntry.from_member(member, make_quote(symbol, change_percent, **quote_kwargs))

    return _make


@pytest.fixture
def make_snapshot(make_entry):
    """Snapshot from {basket_name: [(symbol, change%)]} sector rows."""

    def _make(sectors=None, indices=(), mega_caps=()):
        return MarketSnapshot(
            timestamp=datetime(2026, 10, 16, 21, 0, tzinfo=timezone.utc),
            indices=[
                make_entry(s, c, basket=BasketKind.INDEX, basket_name="Indices")
                for s, c in indices
            ],
            mega_caps=[
                make_entry(s, c, basket=BasketKind.MEGA_CAP, basket_name="Magnificent 7")
                for s, c in mega_caps
            ],
            sectors=[
                SectorBasket(
                    name=name,
                    entries=[make_entry(s, c, basket_name=name) for s, c in rows],
                )
                for name, rows in (sectors or {}).items()
            ],
        )

    return _make


@pytest.fixture
def member():
    def _make(symbol, basket=BasketKind.SECTOR, basket_name="Test Basket"):
        return UniverseMember(
            symbol=symbol,
            name=f"{symbol} Inc",
            sector="Test",
            basket=basket,
            basket_name=basket_name,
        )

    return _make
