"""
Data Ingestion Provider Interfaces

Defines the contract every quote/series provider adapter fulfils.
Adapters raise on failure; the sources built on top of them never do.
"""

from abc import ABC, abstractmethod
from typing import Optional

from market_digest.schemas.market import Quote


class QuoteProvider(ABC):
    """
    Quote provider contract.

    INPUT: symbol
    OUTPUT: Quote, or None when the provider reports no usable price
    RAISES: ExternalAPIError on transport/payload failure
    """

    name: str = "QuoteProvider"

    @abstractmethod
    async def get_quote(self, symbol: str) -> Optional[Quote]:
        """Fetch the current quote for a symbol."""
        pass


class SeriesProvider(ABC):
    """
    Historical series provider contract.

    INPUT: symbol, lookback window in calendar days
    OUTPUT: daily closes, oldest first (possibly empty)
    RAISES: ExternalAPIError on transport/payload failure
    """

    name: str = "SeriesProvider"

    @abstractmethod
    async def get_closes(self, symbol: str, lookback_days: int) -> list[float]:
        """Fetch daily closes for a symbol."""
        pass
