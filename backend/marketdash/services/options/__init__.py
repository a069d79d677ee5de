"""
Options Ratio Service

CONTRACT:
    Input:  RatioRequest (ticker, persist)
    Output: RatioRecord

RESPONSIBILITIES:
    - Bounded cursor pagination over the full options chain
    - Open interest per strike, 5 strikes either side of spot
    - Average call/put ratio, best-effort history append
"""

from marketdash.services.options.interface import OptionsRatioServiceInterface
from marketdash.services.options.aggregator import (
    aggregate_by_strike,
    compute_ratio,
    fetch_full_chain,
    latest_contract_timestamp,
    select_strike_window,
)
from marketdash.services.options.service import (
    OptionsRatioService,
    get_options_ratio_service,
)

__all__ = [
    "OptionsRatioServiceInterface",
    "OptionsRatioService",
    "get_options_ratio_service",
    "aggregate_by_strike",
    "compute_ratio",
    "fetch_full_chain",
    "latest_contract_timestamp",
    "select_strike_window",
]
