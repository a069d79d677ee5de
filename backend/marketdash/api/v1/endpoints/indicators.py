"""
Indicator API Endpoints

Technical indicators from posted bars or from a symbol's daily history.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from marketdash.api.v1.errors import to_http_exception
from marketdash.schemas.market import Bar, Interval
from marketdash.schemas.analytics import IndicatorSnapshot
from marketdash.services.base import ServiceError
from marketdash.services.data_sources import PriceSource, get_price_source
from marketdash.services.indicators import IndicatorService, get_indicator_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=IndicatorSnapshot)
async def compute_indicators(
    bars: list[Bar],
    service: IndicatorService = Depends(get_indicator_service),
):
    """
    Calculate indicators for the posted bars.

    Short histories return 0 for undefined indicators rather than an error.
    """
    return service.compute_indicators(bars)


@router.get("/{symbol}", response_model=IndicatorSnapshot)
async def get_indicators(
    symbol: str,
    period: str = Query("1y", description="History range, e.g. 6mo, 1y, 2y"),
    service: IndicatorService = Depends(get_indicator_service),
    price_source: PriceSource = Depends(get_price_source),
):
    """Fetch daily bars for symbol and calculate its indicators."""
    symbol = symbol.upper().strip()

    try:
        bars = await price_source.get_bars(symbol, Interval.D1, period)
    except ServiceError as e:
        logger.warning(f"Bars unavailable for {symbol}: {e}")
        raise to_http_exception(e)

    if not bars:
        raise HTTPException(status_code=404, detail=f"Data not found for {symbol}")

    return service.compute_indicators(bars)
