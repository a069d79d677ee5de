"""
Options Ratio Service Implementation

Spot price -> full chain -> per-strike open interest -> strike window ->
call/put ratio -> history.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from marketdash.core.config import settings
from marketdash.db.history_store import get_history_store
from marketdash.schemas.analytics import RatioRecord, RatioRequest
from marketdash.services.base import ExternalAPIError, ServiceError
from marketdash.services.data_sources import (
    HistoryStore,
    OptionsSource,
    SpotPriceSource,
    get_options_source,
    get_price_source,
)
from marketdash.services.options.interface import OptionsRatioServiceInterface
from marketdash.services.options.aggregator import (
    aggregate_by_strike,
    compute_ratio,
    fetch_full_chain,
    latest_contract_timestamp,
    select_strike_window,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OptionsRatioService(OptionsRatioServiceInterface):
    """
    Options Ratio Service.

    History writes are best-effort: a failed write is logged and the
    computed record is still returned.
    """

    def __init__(
        self,
        spot_source: Optional[SpotPriceSource] = None,
        options_source: Optional[OptionsSource] = None,
        history_store: Optional[HistoryStore] = None,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.spot_source = spot_source or get_price_source()
        self.options_source = options_source or get_options_source()
        self.history_store = history_store or get_history_store()
        self._now = now

    @property
    def name(self) -> str:
        return "OptionsRatioService"

    async def execute(self, input_data: RatioRequest) -> Optional[RatioRecord]:
        return await self.compute_options_ratio(input_data.ticker, input_data.persist)

    async def compute_options_ratio(
        self, ticker: str, persist: bool = True
    ) -> Optional[RatioRecord]:
        ticker = ticker.upper()

        price = await self.spot_source.get_current_price(ticker)
        if not price or price <= 0:
            raise ExternalAPIError(self.name, f"Could not fetch current price for {ticker}")

        contracts = await fetch_full_chain(
            self.options_source,
            ticker,
            max_pages=settings.options_max_pages,
            timeout_seconds=settings.options_timeout_seconds,
        )
        if not contracts:
            logger.warning(f"No options data found for {ticker}")
            return None

        aggregates = aggregate_by_strike(contracts)
        window = select_strike_window(list(aggregates), price, settings.options_strike_window)
        if not window:
            return None

        ratio, strikes_count = compute_ratio(aggregates, window)
        timestamp = latest_contract_timestamp(contracts) or self._now()

        record = RatioRecord(
            timestamp=timestamp,
            ticker=ticker,
            price=price,
            ratio=ratio,
            strikes_count=strikes_count,
        )
        logger.info(
            f"{ticker} @ {price:.2f}: call/put ratio {ratio:.3f} over {strikes_count} strikes"
        )

        if persist:
            await self._persist(record)
        return record

    async def _persist(self, record: RatioRecord) -> None:
        try:
            await self.history_store.append(record)
        except Exception as e:
            logger.error(f"Error saving ratio to DB for {record.ticker}: {e}")

    async def compute_batch(
        self, tickers: list[str], pause_seconds: Optional[float] = None
    ) -> list[RatioRecord]:
        pause = settings.options_batch_pause_seconds if pause_seconds is None else pause_seconds
        records = []

        for i, ticker in enumerate(tickers):
            if i > 0 and pause > 0:
                await asyncio.sleep(pause)
            try:
                record = await self.compute_options_ratio(ticker, persist=True)
            except ServiceError as e:
                logger.error(f"Options ratio failed for {ticker}: {e}")
                continue
            if record is not None:
                records.append(record)

        logger.info(f"Options batch: {len(records)}/{len(tickers)} tickers computed")
        return records

    async def get_history(
        self,
        ticker: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[RatioRecord]:
        return await self.history_store.query(ticker=ticker, start=start, end=end)

    async def health_check(self) -> bool:
        return True


# Singleton instance
_service_instance: Optional[OptionsRatioService] = None


def get_options_ratio_service() -> OptionsRatioService:
    """Get or create options ratio service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = OptionsRatioService()
    return _service_instance
