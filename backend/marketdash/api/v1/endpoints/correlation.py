"""
Correlation API Endpoints

Macro beta and cross-asset correlation matrices.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from marketdash.api.v1.errors import to_http_exception
from marketdash.schemas.market import MacroType
from marketdash.schemas.analytics import BetaResult, CorrelationResult
from marketdash.services.base import ServiceError
from marketdash.services.correlation import CorrelationService, get_correlation_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/beta", response_model=BetaResult)
async def get_macro_beta(
    macro_type: MacroType = Query(MacroType.CPI),
    months: int = Query(24, ge=1, le=240),
    symbol: str = Query("^GSPC"),
    service: CorrelationService = Depends(get_correlation_service),
):
    """
    Correlation between a macro series' changes and an index's returns.

    An empty data_points list means there was not enough aligned data.
    """
    try:
        return await service.compute_beta(macro_type, months=months, symbol=symbol.upper())
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/assets", response_model=CorrelationResult)
async def get_asset_correlation(
    tickers: str = Query(..., description="Comma-separated tickers, e.g. SPY,QQQ,GLD"),
    months: int = Query(12, ge=1, le=120),
    service: CorrelationService = Depends(get_correlation_service),
):
    """Daily-return correlation matrix over the dates all tickers traded."""
    symbols = []
    for raw in tickers.split(","):
        symbol = raw.strip().upper()
        if symbol and symbol not in symbols:
            symbols.append(symbol)

    if not symbols:
        raise HTTPException(status_code=400, detail="At least one ticker is required")

    try:
        return await service.compute_asset_correlation(symbols, months=months)
    except ServiceError as e:
        raise to_http_exception(e)
