"""
Indicator Engine

Close-price sequence -> IndicatorBundle.
NO I/O - Pure Python/NumPy calculations.
"""

from typing import Optional, Sequence
import numpy as np

from market_digest.schemas.market import IndicatorBundle, RsiFlag
from market_digest.services.indicators.calculations import (
    sma,
    rsi,
    bollinger_bands,
    percent_offset,
    last_value,
)

MIN_CLOSES = 15
RSI_PERIOD = 14
RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0
BOLLINGER_PERIOD = 20
BOLLINGER_STD_DEV = 2.0


def rsi_flag(value: Optional[float]) -> Optional[RsiFlag]:
    """Classify RSI into overbought/oversold."""
    if value is None:
        return None
    if value >= RSI_OVERBOUGHT:
        return RsiFlag.OVERBOUGHT
    if value <= RSI_OVERSOLD:
        return RsiFlag.OVERSOLD
    return None


def compute_indicator_bundle(closes: Sequence[float]) -> Optional[IndicatorBundle]:
    """
    Calculate the indicator bundle for a close series (oldest first).

    Returns None for fewer than MIN_CLOSES points. Each sub-metric is
    independently None when the series is too short for it.
    """
    if closes is None or len(closes) < MIN_CLOSES:
        return None

    data = np.asarray(closes, dtype=float)
    current = float(data[-1])

    rsi_value = last_value(rsi(data, RSI_PERIOD))
    ma20 = last_value(sma(data, 20))
    ma50 = last_value(sma(data, 50))
    _, _, _, percent_b = bollinger_bands(data, BOLLINGER_PERIOD, BOLLINGER_STD_DEV)

    return IndicatorBundle(
        rsi14=rsi_value,
        rsi_flag=rsi_flag(rsi_value),
        ma20=ma20,
        ma50=ma50,
        ma20_percent_offset=percent_offset(current, ma20),
        ma50_percent_offset=percent_offset(current, ma50),
        bollinger_percent=last_value(percent_b),
    )
