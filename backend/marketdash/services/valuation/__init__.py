"""
Valuation Engine Service (CAPE)

CONTRACT:
    Input:  symbol
    Output: ValuationSeries (newest first)

RESPONSIBILITIES:
    - Index CAPE from real earnings, cached for a day
    - Security CAPE from nominal EPS restated with CPI
    - Quarterly vs. annual earnings detection
"""

from marketdash.services.valuation.interface import ValuationServiceInterface
from marketdash.services.valuation.calculations import (
    compute_cape_series,
    cpi_at,
    dedupe_monthly,
)
from marketdash.services.valuation.service import (
    ValuationService,
    get_valuation_service,
    valuation_mode,
)

__all__ = [
    "ValuationServiceInterface",
    "ValuationService",
    "get_valuation_service",
    "valuation_mode",
    "compute_cape_series",
    "cpi_at",
    "dedupe_monthly",
]
