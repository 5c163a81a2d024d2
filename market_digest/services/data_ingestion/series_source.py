"""
Series Source

Daily close history for indicator computation. Series shorter than
MIN_SERIES_POINTS are discarded rather than partially used.
"""

import logging
from typing import Optional

from market_digest.services.data_ingestion.interface import SeriesProvider

logger = logging.getLogger(__name__)

MIN_SERIES_POINTS = 15
DEFAULT_LOOKBACK_DAYS = 120


class SeriesSource:
    """Fetches close series and enforces the minimum length."""

    def __init__(self, provider: SeriesProvider, min_points: int = MIN_SERIES_POINTS):
        self.provider = provider
        self.min_points = min_points

    async def fetch_closes(
        self, symbol: str, lookback_days: int = DEFAULT_LOOKBACK_DAYS
    ) -> Optional[list[float]]:
        """
        Fetch closes for a symbol, oldest first.

        Returns None on provider failure or when fewer than
        `min_points` closes are available.
        """
        try:
            closes = await self.provider.get_closes(symbol, lookback_days)
        except Exception as e:
            logger.warning(f"{self.provider.name} series failed for {symbol}: {e}")
            return None

        closes = [float(c) for c in closes or [] if c is not None]
        if len(closes) < self.min_points:
            logger.debug(
                f"Series for {symbol} too short ({len(closes)} < {self.min_points})"
            )
            return None
        return closes
