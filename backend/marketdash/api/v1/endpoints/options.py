"""
Options Sentiment API Endpoints
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from marketdash.api.v1.errors import to_http_exception
from marketdash.schemas.analytics import RatioRecord, RatioRequest
from marketdash.services.base import ServiceError
from marketdash.services.options import OptionsRatioService, get_options_ratio_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/ratio", response_model=RatioRecord)
async def calculate_options_ratio(
    request: RatioRequest,
    service: OptionsRatioService = Depends(get_options_ratio_service),
):
    """
    Call/put open interest ratio over the 10 strikes around spot.

    The record is appended to history unless persist is false.
    """
    try:
        record = await service.execute(request)
    except ServiceError as e:
        logger.error(f"Options ratio failed for {request.ticker}: {e}")
        raise to_http_exception(e)

    if record is None:
        raise HTTPException(status_code=404, detail=f"No options data for {request.ticker.upper()}")
    return record


@router.get("/history", response_model=list[RatioRecord])
async def get_options_history(
    ticker: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    service: OptionsRatioService = Depends(get_options_ratio_service),
):
    """Stored ratio records, oldest first."""
    return await service.get_history(ticker=ticker, start=start, end=end)
