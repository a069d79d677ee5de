"""
Series Alignment

RESPONSIBILITIES:
    - Match dated series on a shared timeline (exact, nearest, month bucket)
    - Drop dates that cannot be matched in every input

PURE PYTHON - callers decide what an insufficient alignment means.
"""

from marketdash.services.alignment.aligner import (
    MatchPolicy,
    align_series,
    find_nearest,
    item_value,
    month_key,
    sort_by_date,
)

__all__ = [
    "MatchPolicy",
    "align_series",
    "find_nearest",
    "item_value",
    "month_key",
    "sort_by_date",
]
