"""QuoteSource and SeriesSource tests."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from market_digest.schemas.market import QuoteOrigin
from market_digest.services.base import ExternalAPIError
from market_digest.services.data_ingestion import QuoteSource, SeriesSource


def fake_provider(name, get_quote=None):
    provider = MagicMock()
    provider.name = name
    provider.get_quote = get_quote or AsyncMock(return_value=None)
    return provider


class TestQuoteSource:
    @pytest.fixture
    def secondary_quote(self, make_quote):
        return make_quote("AAPL", 1.5, source=QuoteOrigin.SECONDARY)

    @pytest.mark.asyncio
    async def test_primary_success_skips_secondary(self, make_quote):
        primary = fake_provider("primary", AsyncMock(return_value=make_quote("AAPL", 1.0)))
        secondary = fake_provider("secondary")

        quote = await QuoteSource(primary, secondary).fetch_quote("AAPL")

        assert quote.source == QuoteOrigin.PRIMARY
        secondary.get_quote.assert_not_called()

    @pytest.mark.asyncio
    async def test_primary_error_falls_back(self, secondary_quote):
        primary = fake_provider(
            "primary", AsyncMock(side_effect=ExternalAPIError("primary", "HTTP 500"))
        )
        secondary = fake_provider("secondary", AsyncMock(return_value=secondary_quote))

        quote = await QuoteSource(primary, secondary).fetch_quote("AAPL")

        assert quote is not None
        assert quote.source == QuoteOrigin.SECONDARY
        secondary.get_quote.assert_awaited_once_with("AAPL")

    @pytest.mark.asyncio
    async def test_primary_timeout_falls_back(self, make_quote, secondary_quote):
        async def slow(symbol):
            await asyncio.sleep(5)
            return make_quote(symbol, 1.0)

        primary = fake_provider("primary", AsyncMock(side_effect=slow))
        secondary = fake_provider("secondary", AsyncMock(return_value=secondary_quote))

        quote = await QuoteSource(primary, secondary, timeout=0.01).fetch_quote("AAPL")

        assert quote.source == QuoteOrigin.SECONDARY

    @pytest.mark.asyncio
    async def test_primary_without_price_falls_back(self, secondary_quote):
        primary = fake_provider("primary", AsyncMock(return_value=None))
        secondary = fake_provider("secondary", AsyncMock(return_value=secondary_quote))

        quote = await QuoteSource(primary, secondary).fetch_quote("AAPL")

        assert quote.source == QuoteOrigin.SECONDARY

    @pytest.mark.asyncio
    async def test_no_secondary_yields_none(self):
        primary = fake_provider("primary", AsyncMock(side_effect=RuntimeError("boom")))

        source = QuoteSource(primary)

        assert source.has_fallback is False
        assert await source.fetch_quote("AAPL") is None

    @pytest.mark.asyncio
    async def test_both_fail_never_raises(self):
        primary = fake_provider("primary", AsyncMock(side_effect=RuntimeError("down")))
        secondary = fake_provider("secondary", AsyncMock(side_effect=ValueError("bad json")))

        assert await QuoteSource(primary, secondary).fetch_quote("AAPL") is None


class TestSeriesSource:
    def provider(self, closes=None, error=None):
        provider = MagicMock()
        provider.name = "series"
        provider.get_closes = AsyncMock(return_value=closes, side_effect=error)
        return provider

    @pytest.mark.asyncio
    async def test_returns_closes(self):
        closes = [float(i) for i in range(1, 31)]
        source = SeriesSource(self.provider(closes))

        assert await source.fetch_closes("AAPL", 120) == closes

    @pytest.mark.asyncio
    async def test_short_series_is_absent(self):
        source = SeriesSource(self.provider([1.0] * 14))
        assert await source.fetch_closes("AAPL") is None

    @pytest.mark.asyncio
    async def test_exactly_15_points_is_usable(self):
        source = SeriesSource(self.provider([1.0] * 15))
        assert len(await source.fetch_closes("AAPL")) == 15

    @pytest.mark.asyncio
    async def test_provider_error_is_absent(self):
        source = SeriesSource(self.provider(error=ExternalAPIError("series", "timeout")))
        assert await source.fetch_closes("AAPL") is None
