"""
Indicator Engine Service

CONTRACT:
    Input:  list[Bar] (daily OHLCV)
    Output: IndicatorSnapshot

RESPONSIBILITIES:
    - SMA, RSI and ATR with Wilder smoothing
    - Relative volume, optionally projected over the live session
    - Moving averages and price distances for 20/50/150/200

PURE PYTHON - Uses NumPy for calculations.
Short histories yield neutral values, never exceptions.
"""

from marketdash.services.indicators.interface import IndicatorServiceInterface
from marketdash.services.indicators.service import IndicatorService, get_indicator_service

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
]
