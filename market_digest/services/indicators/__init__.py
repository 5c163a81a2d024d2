"""
Indicator Engine

CONTRACT:
    Input:  daily closes, oldest first
    Output: IndicatorBundle (or None below 15 closes)

RESPONSIBILITIES:
    - RSI(14) with Wilder's smoothing and overbought/oversold flag
    - MA20 / MA50 and the price's percentage offset from each
    - Bollinger(20, 2) position of the last close

PURE PYTHON - No I/O.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from market_digest.services.indicators.service import (
    compute_indicator_bundle,
    rsi_flag,
    MIN_CLOSES,
)

__all__ = [
    "compute_indicator_bundle",
    "rsi_flag",
    "MIN_CLOSES",
]
