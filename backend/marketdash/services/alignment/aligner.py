"""
Series Alignment

Projects several dated series onto the first series' timeline.
Pure Python - no I/O, no interpolation, no forward-fill.
"""

from datetime import date
from enum import Enum
from typing import Optional, Sequence, Union

from marketdash.schemas.market import AlignedSeries, Bar, TimeSeriesPoint

Dated = Union[Bar, TimeSeriesPoint]


class MatchPolicy(str, Enum):
    EXACT = "exact"
    NEAREST = "nearest"
    MONTH = "month"


def item_value(item: Dated) -> float:
    """Bars contribute their close, points their value."""
    if isinstance(item, Bar):
        return item.close
    return item.value


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def sort_by_date(items: Sequence[Dated]) -> list[Dated]:
    return sorted(items, key=lambda item: item.date)


def find_nearest(
    items: Sequence[Dated], target: date, tolerance_days: int = 5
) -> Optional[Dated]:
    """
    Item closest to target with |days| strictly below tolerance_days.

    Items must be sorted ascending; on equal distance the earlier item wins.
    """
    best = None
    best_diff = None

    for item in items:
        diff = abs((item.date - target).days)
        if diff >= tolerance_days:
            continue
        if best_diff is None or diff < best_diff:
            best = item
            best_diff = diff

    return best


def _last_per_month(items: Sequence[Dated]) -> dict[str, Dated]:
    buckets: dict[str, Dated] = {}
    for item in items:
        buckets[month_key(item.date)] = item
    return buckets


def align_series(
    series: Sequence[Sequence[Dated]],
    policy: MatchPolicy = MatchPolicy.EXACT,
    tolerance_days: int = 5,
) -> AlignedSeries:
    """
    Align two or more series on the anchor (first) series' dates.

    Args:
        series: Collections of Bar or TimeSeriesPoint, any order
        policy: How anchor dates are matched in the other series
        tolerance_days: Exclusive bound for NEAREST matches

    Returns:
        AlignedSeries with one value vector per input series. Dates that
        cannot be matched in every series are dropped.
    """
    if len(series) < 2:
        raise ValueError("align_series needs at least two series")

    ordered = [sort_by_date(s) for s in series]
    anchor, others = ordered[0], ordered[1:]

    dates: list[date] = []
    values: list[list[float]] = [[] for _ in ordered]

    def emit(on: date, row: Sequence[Dated]) -> None:
        dates.append(on)
        for i, item in enumerate(row):
            values[i].append(item_value(item))

    if policy == MatchPolicy.EXACT:
        lookups = [{item.date: item for item in other} for other in others]
        for item in anchor:
            matches = [lookup.get(item.date) for lookup in lookups]
            if all(m is not None for m in matches):
                emit(item.date, [item, *matches])

    elif policy == MatchPolicy.NEAREST:
        for item in anchor:
            matches = [find_nearest(other, item.date, tolerance_days) for other in others]
            if all(m is not None for m in matches):
                emit(item.date, [item, *matches])

    elif policy == MatchPolicy.MONTH:
        anchor_months = _last_per_month(anchor)
        other_months = [_last_per_month(other) for other in others]
        for key, item in anchor_months.items():
            matches = [months.get(key) for months in other_months]
            if all(m is not None for m in matches):
                emit(item.date, [item, *matches])

    else:
        raise ValueError(f"Unknown match policy: {policy}")

    return AlignedSeries(dates=dates, values=values)
