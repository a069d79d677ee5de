"""
Valuation API Endpoints
"""

from fastapi import APIRouter, Depends

from marketdash.api.v1.errors import to_http_exception
from marketdash.schemas.analytics import ValuationSeries
from marketdash.services.base import ServiceError
from marketdash.services.valuation import ValuationService, get_valuation_service

router = APIRouter()


@router.get("/{symbol}", response_model=ValuationSeries)
async def get_valuation_series(
    symbol: str,
    service: ValuationService = Depends(get_valuation_service),
):
    """CAPE history, newest first. ^GSPC and SPY use S&P 500 real earnings."""
    try:
        return await service.execute(symbol.strip())
    except ServiceError as e:
        raise to_http_exception(e)
