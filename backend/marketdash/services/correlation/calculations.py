"""
Correlation Calculations

Product-moment correlation and period-over-period changes.
Degenerate inputs give 0, never NaN or Infinity.
"""

import calendar
import math
from datetime import date

import numpy as np


def pearson(x, y) -> float:
    """
    Pearson correlation of two equal-length samples.

    (n*Sxy - Sx*Sy) / sqrt((n*Sxx - Sx^2) * (n*Syy - Sy^2))

    Returns 0 for mismatched or empty inputs and for constant series.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)
    if n == 0 or n != len(y):
        return 0.0

    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))
    sum_y2 = float(np.sum(y * y))

    numerator = n * sum_xy - sum_x * sum_y
    variance_product = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)

    # rounding can leave a constant series slightly negative
    if variance_product <= 0:
        return 0.0

    result = numerator / math.sqrt(variance_product)
    if not math.isfinite(result):
        return 0.0
    return max(-1.0, min(1.0, result))


def percent_change(previous: float, current: float) -> float:
    """(current - previous) / previous; 0 when previous is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous


def percent_changes(values) -> list[float]:
    """Period-over-period changes; one shorter than the input."""
    return [percent_change(prev, curr) for prev, curr in zip(values, values[1:])]


def months_ago(today: date, months: int) -> date:
    """Same day-of-month `months` calendar months earlier, clamped to month end."""
    month_index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def lookback_period(months: int) -> str:
    """Yahoo range covering `months` plus a year of slack for the first change."""
    years = max(2, math.ceil(months / 12) + 1)
    return f"{years}y"
