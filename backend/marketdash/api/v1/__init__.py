"""
API v1 Router

All analytics endpoints for the dashboard.
"""

from fastapi import APIRouter

from marketdash.api.v1.endpoints import indicators, correlation, valuation, options

router = APIRouter()

# Include all endpoint routers
router.include_router(indicators.router, prefix="/indicators", tags=["Indicators"])
router.include_router(correlation.router, prefix="/correlation", tags=["Correlation"])
router.include_router(valuation.router, prefix="/valuation", tags=["Valuation"])
router.include_router(options.router, prefix="/options", tags=["Options Sentiment"])
