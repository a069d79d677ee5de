"""
SQL-backed options ratio history.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketdash.db.database import AsyncSessionLocal, session_scope
from marketdash.db.models import OptionsRatioHistory
from marketdash.schemas.analytics import RatioRecord
from marketdash.services.data_sources.interface import HistoryStore

logger = logging.getLogger(__name__)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _row_to_record(row: OptionsRatioHistory) -> RatioRecord:
    return RatioRecord(
        timestamp=row.timestamp.replace(tzinfo=timezone.utc),
        ticker=row.ticker,
        price=row.price,
        ratio=row.ratio,
        strikes_count=row.strikes_count,
    )


class SQLHistoryStore(HistoryStore):
    """Append-only RatioRecord store on the async SQLAlchemy engine."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_factory = session_factory or AsyncSessionLocal

    async def append(self, record: RatioRecord) -> bool:
        async with session_scope(self.session_factory) as session:
            session.add(
                OptionsRatioHistory(
                    timestamp=_to_naive_utc(record.timestamp),
                    ticker=record.ticker.upper(),
                    price=record.price,
                    ratio=record.ratio,
                    strikes_count=record.strikes_count,
                )
            )
        logger.info(f"Saved ratio for {record.ticker} to DB.")
        return True

    async def query(
        self,
        ticker: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[RatioRecord]:
        stmt = select(OptionsRatioHistory)
        if ticker:
            stmt = stmt.where(OptionsRatioHistory.ticker == ticker.upper())
        if start is not None:
            stmt = stmt.where(OptionsRatioHistory.timestamp >= _to_naive_utc(start))
        if end is not None:
            stmt = stmt.where(OptionsRatioHistory.timestamp <= _to_naive_utc(end))
        stmt = stmt.order_by(OptionsRatioHistory.timestamp.asc(), OptionsRatioHistory.id.asc())

        async with session_scope(self.session_factory) as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()

        return [_row_to_record(row) for row in rows]


# Singleton instance
_store_instance: Optional[SQLHistoryStore] = None


def get_history_store() -> SQLHistoryStore:
    """Get or create the history store on the application engine."""
    global _store_instance
    if _store_instance is None:
        _store_instance = SQLHistoryStore()
    return _store_instance
