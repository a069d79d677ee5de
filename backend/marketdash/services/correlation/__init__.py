"""
Correlation Engine Service

CONTRACT:
    Input:  MacroType + lookback months, or a ticker list
    Output: BetaResult / CorrelationResult

RESPONSIBILITIES:
    - Pearson correlation with 0 for degenerate samples
    - Macro beta on nearest-date matched changes
    - N x N daily-return matrix on the shared trading calendar
"""

from marketdash.services.correlation.interface import CorrelationServiceInterface
from marketdash.services.correlation.calculations import pearson, percent_changes
from marketdash.services.correlation.service import (
    CorrelationService,
    get_correlation_service,
)

__all__ = [
    "CorrelationServiceInterface",
    "CorrelationService",
    "get_correlation_service",
    "pearson",
    "percent_changes",
]
