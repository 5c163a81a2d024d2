"""
Technical Indicator Calculations

Pure Python/NumPy implementations of technical indicators.
NO LLM INVOLVEMENT - All math is deterministic.
"""

import numpy as np
from typing import Optional


# Relative width below which the Bollinger band is treated as collapsed
ZERO_WIDTH_TOLERANCE = 1e-9


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    if len(data) < period:
        return np.full(len(data), np.nan)

    result = np.full(len(data), np.nan)
    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index (Wilder's smoothing)."""
    if len(closes) < period + 1:
        return np.full(len(closes), np.nan)

    # Calculate price changes
    deltas = np.diff(closes)

    # Separate gains and losses
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # Seed with simple mean of the first `period` differences
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = np.full(len(closes), np.nan)
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i + 1] = _rsi_value(avg_gain, avg_loss)

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def bollinger_bands(
    closes: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands with population standard deviation.

    Returns: (upper, middle, lower, percent_b)
    percent_b is 0 at the lower band, 100 at the upper band and NaN
    where the band has zero width.
    """
    middle = sma(closes, period)

    std = np.full(len(closes), np.nan)
    for i in range(period - 1, len(closes)):
        std[i] = np.std(closes[i - period + 1 : i + 1])  # ddof=0

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    width = upper - lower
    collapsed = width <= ZERO_WIDTH_TOLERANCE * np.maximum(1.0, np.abs(middle))
    with np.errstate(divide="ignore", invalid="ignore"):
        percent_b = np.where(collapsed, np.nan, (closes - lower) / width * 100)

    return upper, middle, lower, percent_b


# =============================================================================
# HELPERS
# =============================================================================


def percent_offset(value: float, reference: Optional[float]) -> Optional[float]:
    """Percentage distance of value from reference."""
    if reference is None or reference == 0:
        return None
    return (value - reference) / reference * 100


def last_value(arr: np.ndarray) -> Optional[float]:
    """Get the most recent value, None if it is NaN or the array is empty."""
    if len(arr) == 0 or np.isnan(arr[-1]):
        return None
    return float(arr[-1])
