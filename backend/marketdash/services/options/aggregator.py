"""
Options Chain Aggregation

Pagination over a cursor-based chain source, per-strike open interest,
the strike window around spot and the call/put ratio over it.
"""

import asyncio
import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from marketdash.schemas.market import ContractType, OptionContract
from marketdash.schemas.analytics import StrikeAggregate
from marketdash.services.base import PaginationLimitError
from marketdash.services.data_sources.interface import OptionsSource

logger = logging.getLogger(__name__)

NANOS_PER_MILLI = 1_000_000


async def fetch_full_chain(
    source: OptionsSource,
    ticker: str,
    max_pages: int = 50,
    timeout_seconds: float = 60.0,
    clock: Callable[[], float] = time.monotonic,
) -> list[OptionContract]:
    """
    Follow the cursor until the source stops returning one.

    Raises:
        PaginationLimitError: more than max_pages pages, or the whole
            fetch outlived timeout_seconds
    """
    contracts: list[OptionContract] = []
    cursor: Optional[str] = None
    pages = 0
    started = clock()

    while True:
        if pages >= max_pages:
            raise PaginationLimitError(
                "OptionsChain",
                f"{ticker}: chain exceeds {max_pages} pages",
                {"contracts_so_far": len(contracts)},
            )

        remaining = timeout_seconds - (clock() - started)
        if remaining <= 0:
            raise PaginationLimitError(
                "OptionsChain",
                f"{ticker}: chain fetch exceeded {timeout_seconds:.0f}s",
                {"pages": pages, "contracts_so_far": len(contracts)},
            )

        try:
            page = await asyncio.wait_for(source.get_options_page(ticker, cursor), timeout=remaining)
        except asyncio.TimeoutError as e:
            raise PaginationLimitError(
                "OptionsChain",
                f"{ticker}: chain fetch exceeded {timeout_seconds:.0f}s",
                {"pages": pages, "contracts_so_far": len(contracts)},
            ) from e

        pages += 1
        contracts.extend(page.contracts)
        logger.debug(f"{ticker} page {pages}: {len(page.contracts)} contracts, total {len(contracts)}")

        if not page.next_cursor:
            break
        cursor = page.next_cursor

    logger.info(f"Total received {len(contracts)} option contracts for {ticker} in {pages} pages")
    return contracts


def aggregate_by_strike(contracts: Iterable[OptionContract]) -> dict[float, StrikeAggregate]:
    """Sum call and put open interest per strike."""
    calls: dict[float, float] = defaultdict(float)
    puts: dict[float, float] = defaultdict(float)

    for contract in contracts:
        if contract.contract_type == ContractType.CALL:
            calls[contract.strike] += contract.open_interest
            puts[contract.strike] += 0.0
        else:
            puts[contract.strike] += contract.open_interest
            calls[contract.strike] += 0.0

    return {
        strike: StrikeAggregate(
            strike=strike,
            call_open_interest=calls[strike],
            put_open_interest=puts[strike],
        )
        for strike in sorted(calls)
    }


def select_strike_window(strikes: Sequence[float], spot: float, width: int = 5) -> list[float]:
    """
    Up to `width` strikes below the pivot and `width` from it upward.

    The pivot is the first strike >= spot, or the highest strike when spot
    is above them all.
    """
    ordered = sorted(strikes)
    if not ordered:
        return []

    pivot = next((i for i, strike in enumerate(ordered) if strike >= spot), len(ordered) - 1)
    return ordered[max(0, pivot - width):min(len(ordered), pivot + width)]


def compute_ratio(
    aggregates: dict[float, StrikeAggregate], window: Sequence[float]
) -> tuple[float, int]:
    """
    Mean call/put ratio over window strikes with put open interest.

    Strikes without puts are left out. Returns (ratio, strikes used);
    (0.0, 0) when none qualify.
    """
    ratios = []
    for strike in window:
        agg = aggregates.get(strike)
        if agg is None or agg.put_open_interest <= 0:
            continue
        ratios.append(agg.call_open_interest / agg.put_open_interest)

    if not ratios:
        return 0.0, 0
    return sum(ratios) / len(ratios), len(ratios)


def contract_timestamp_ms(contract: OptionContract) -> Optional[float]:
    """Day bar time, else last quote, else last trade (ns -> ms)."""
    if contract.day_timestamp_ms:
        return contract.day_timestamp_ms
    if contract.last_quote_ns:
        return contract.last_quote_ns / NANOS_PER_MILLI
    if contract.last_trade_ns:
        return contract.last_trade_ns / NANOS_PER_MILLI
    return None


def latest_contract_timestamp(contracts: Iterable[OptionContract]) -> Optional[datetime]:
    """Most recent activity across the chain as UTC, or None."""
    latest = 0.0
    for contract in contracts:
        ts = contract_timestamp_ms(contract)
        if ts and ts > latest:
            latest = ts

    if latest <= 0:
        return None
    return datetime.fromtimestamp(latest / 1000, tz=timezone.utc)
