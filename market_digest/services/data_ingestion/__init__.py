"""
Data Ingestion Service

CONTRACT:
    Input:  Universe (indices, mega-caps, sector baskets)
    Output: MarketSnapshot

RESPONSIBILITIES:
    - Fetch quotes from Yahoo Finance, falling back to Finnhub
    - Fetch daily close series for the indicator target set
    - Pace basket fetches to stay under provider rate limits
    - Drop symbols whose quote could not be fetched

NO LLM INVOLVEMENT - Pure data fetching and transformation.
"""

from market_digest.services.data_ingestion.interface import QuoteProvider, SeriesProvider
from market_digest.services.data_ingestion.quote_source import QuoteSource
from market_digest.services.data_ingestion.series_source import SeriesSource
from market_digest.services.data_ingestion.snapshot_builder import (
    MarketSnapshotBuilder,
    select_indicator_targets,
)
from market_digest.services.data_ingestion.universe import (
    Universe,
    build_members,
    get_default_universe,
)

__all__ = [
    "QuoteProvider",
    "SeriesProvider",
    "QuoteSource",
    "SeriesSource",
    "MarketSnapshotBuilder",
    "select_indicator_targets",
    "Universe",
    "build_members",
    "get_default_universe",
]
