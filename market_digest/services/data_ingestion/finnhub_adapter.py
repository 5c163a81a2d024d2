"""
Finnhub Quote Adapter

Secondary quote provider. The /quote endpoint only reports price,
change and the day's OHLC; volume, market cap and 52-week fields stay
empty on quotes from this source.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from market_digest.schemas.market import Quote, QuoteOrigin
from market_digest.services.base import ExternalAPIError, RateLimitError
from market_digest.services.data_ingestion.interface import QuoteProvider

logger = logging.getLogger(__name__)

SERVICE_NAME = "Finnhub"


def parse_finnhub_quote(symbol: str, payload: dict) -> Optional[Quote]:
    """Map a Finnhub /quote payload into a Quote. None on zero price."""
    price = payload.get("c")
    if not price:
        return None

    previous_close = payload.get("pc") or None
    change = payload.get("d")
    change_percent = payload.get("dp")

    if change is None:
        change = price - previous_close if previous_close else 0.0
    if change_percent is None:
        change_percent = change / previous_close * 100 if previous_close else 0.0
    if previous_close is None:
        previous_close = price - change

    return Quote(
        symbol=symbol.upper(),
        price=float(price),
        change=float(change),
        change_percent=float(change_percent),
        previous_close=float(previous_close),
        open=payload.get("o") or None,
        high=payload.get("h") or None,
        low=payload.get("l") or None,
        source=QuoteOrigin.SECONDARY,
    )


class FinnhubQuoteProvider(QuoteProvider):
    """Secondary quote provider over the Finnhub REST API."""

    name = SERVICE_NAME

    def __init__(self, api_key: str, base_url: str = "https://finnhub.io/api/v1"):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=10),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch the current quote for a symbol.

        Raises:
            RateLimitError: On HTTP 429
            ExternalAPIError: On any other failure
        """
        session = await self._ensure_session()
        url = f"{self._base_url}/quote"
        params = {"symbol": symbol, "token": self._api_key}

        try:
            async with session.get(url, params=params) as response:
                if response.status == 429:
                    raise RateLimitError(SERVICE_NAME, f"Rate limited fetching {symbol}")
                if response.status != 200:
                    raise ExternalAPIError(
                        SERVICE_NAME,
                        f"Quote request for {symbol} returned status {response.status}",
                    )
                payload = await response.json()
        except ExternalAPIError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ExternalAPIError(SERVICE_NAME, f"Quote request failed for {symbol}: {e}")

        if not isinstance(payload, dict):
            raise ExternalAPIError(SERVICE_NAME, f"Malformed quote payload for {symbol}")

        return parse_finnhub_quote(symbol, payload)
