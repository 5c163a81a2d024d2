"""
Yahoo Finance Data Adapter

Primary quote provider and the daily close-series provider.
yfinance is synchronous, so calls run on a thread pool owned by the
provider. A call abandoned by a timeout keeps its worker busy, so the
pool is sized for the largest concurrent fetch group.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import yfinance as yf

from market_digest.schemas.market import Quote, QuoteOrigin
from market_digest.services.base import ExternalAPIError
from market_digest.services.data_ingestion.interface import QuoteProvider, SeriesProvider

logger = logging.getLogger(__name__)

SERVICE_NAME = "YahooFinance"

# Indices plus mega-caps is the largest group fetched at once
DEFAULT_MAX_WORKERS = 16


def _to_float(value: Any) -> Optional[float]:
    """Coerce a provider number to float, None for missing/NaN."""
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if result != result:  # NaN
        return None
    return result


def _to_int(value: Any) -> Optional[int]:
    result = _to_float(value)
    return int(result) if result is not None else None


def _to_datetime(value: Any) -> Optional[datetime]:
    """Epoch seconds to aware UTC datetime."""
    seconds = _to_float(value)
    if not seconds:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_yahoo_quote(symbol: str, info: dict) -> Optional[Quote]:
    """
    Map a Yahoo quote payload into a Quote.

    Returns None when the price is missing or zero (symbol miss or
    stale data).
    """
    price = _to_float(info.get("regularMarketPrice")) or _to_float(info.get("currentPrice"))
    if not price:
        return None

    previous_close = _to_float(info.get("regularMarketPreviousClose")) or _to_float(
        info.get("previousClose")
    )

    if previous_close:
        change = price - previous_close
        change_percent = change / previous_close * 100
    else:
        change = _to_float(info.get("regularMarketChange")) or 0.0
        change_percent = _to_float(info.get("regularMarketChangePercent")) or 0.0
        previous_close = price - change

    return Quote(
        symbol=symbol.upper(),
        price=price,
        change=round(change, 4),
        change_percent=round(change_percent, 4),
        previous_close=previous_close,
        open=_to_float(info.get("regularMarketOpen")) or _to_float(info.get("open")),
        high=_to_float(info.get("regularMarketDayHigh")) or _to_float(info.get("dayHigh")),
        low=_to_float(info.get("regularMarketDayLow")) or _to_float(info.get("dayLow")),
        volume=_to_int(info.get("regularMarketVolume")) or _to_int(info.get("volume")),
        average_volume=_to_int(info.get("averageVolume")),
        market_cap=_to_float(info.get("marketCap")),
        fifty_two_week_high=_to_float(info.get("fiftyTwoWeekHigh")),
        fifty_two_week_low=_to_float(info.get("fiftyTwoWeekLow")),
        earnings_timestamp=_to_datetime(info.get("earningsTimestamp")),
        source=QuoteOrigin.PRIMARY,
    )


class _YahooPool:
    """Thread pool shared by the calls of one provider."""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="yahoo"
        )

    async def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


class YahooQuoteProvider(_YahooPool, QuoteProvider):
    """Primary quote provider backed by yfinance."""

    name = SERVICE_NAME

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch the current quote for a symbol.

        Raises:
            ExternalAPIError: If the Yahoo call fails
        """
        loop = asyncio.get_running_loop()
        try:
            info = await loop.run_in_executor(self._executor, lambda: yf.Ticker(symbol).info)
        except Exception as e:
            raise ExternalAPIError(SERVICE_NAME, f"Quote request failed for {symbol}: {e}")

        if not info:
            return None
        return parse_yahoo_quote(symbol, info)


class YahooSeriesProvider(_YahooPool, SeriesProvider):
    """Daily close-price history backed by yfinance."""

    name = SERVICE_NAME

    def _download_closes(self, symbol: str, lookback_days: int) -> list[float]:
        start = (datetime.now() - timedelta(days=lookback_days)).strftime("%Y-%m-%d")
        hist = yf.Ticker(symbol).history(start=start, interval="1d")
        if hist.empty:
            return []
        closes = hist["Close"].dropna()
        return [float(c) for c in closes.tolist()]

    async def get_closes(self, symbol: str, lookback_days: int) -> list[float]:
        """
        Fetch daily closes, oldest first.

        Raises:
            ExternalAPIError: If the Yahoo call fails
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                self._executor, lambda: self._download_closes(symbol, lookback_days)
            )
        except Exception as e:
            raise ExternalAPIError(SERVICE_NAME, f"History request failed for {symbol}: {e}")
