"""
Quote Source

Single-symbol quote retrieval with primary/secondary fallback.

Priority:
1. Primary provider, raced against a fixed timeout
2. Secondary provider (optional), same timeout

A failed lookup yields None; provider errors are logged, never raised.
"""

import asyncio
import logging
from typing import Optional

from market_digest.schemas.market import Quote
from market_digest.services.data_ingestion.interface import QuoteProvider

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_TIMEOUT = 8.0


def _usable(quote: Optional[Quote]) -> bool:
    return quote is not None and bool(quote.price)


class QuoteSource:
    """Fetches quotes from the primary provider, falling back to the secondary."""

    def __init__(
        self,
        primary: QuoteProvider,
        secondary: Optional[QuoteProvider] = None,
        timeout: float = DEFAULT_QUOTE_TIMEOUT,
    ):
        self.primary = primary
        self.secondary = secondary
        self.timeout = timeout

    @property
    def has_fallback(self) -> bool:
        return self.secondary is not None

    async def _try_provider(self, provider: QuoteProvider, symbol: str) -> Optional[Quote]:
        try:
            quote = await asyncio.wait_for(provider.get_quote(symbol), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{provider.name} timed out after {self.timeout}s for {symbol}")
            return None
        except Exception as e:
            logger.warning(f"{provider.name} failed for {symbol}: {e}")
            return None

        if not _usable(quote):
            logger.debug(f"{provider.name} returned no usable price for {symbol}")
            return None
        return quote

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch a quote for a symbol.

        Returns:
            Quote tagged with the provider it came from, or None
        """
        quote = await self._try_provider(self.primary, symbol)
        if quote is not None:
            return quote

        if self.secondary is None:
            return None

        quote = await self._try_provider(self.secondary, symbol)
        if quote is None:
            logger.error(f"No quote available for {symbol} from any source")
        else:
            logger.info(f"{symbol}: using {self.secondary.name} @ {quote.price:.2f}")
        return quote
