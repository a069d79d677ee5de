"""
SQLAlchemy models for the MarketDash database.

Uses SQLite for local persistence of options sentiment history.
Rows are append-only; nothing in the application updates or deletes them.
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    DateTime,
    Index,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class OptionsRatioHistory(Base):
    """
    Call/put open interest ratio around the spot price.
    One row per calculation; timestamps are naive UTC.
    """
    __tablename__ = "options_ratio_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    ticker = Column(String(20), nullable=False, index=True)
    price = Column(Float, nullable=False)
    ratio = Column(Float, nullable=False)
    strikes_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Composite index for per-ticker time-range queries
    __table_args__ = (
        Index("ix_options_ratio_ticker_timestamp", "ticker", "timestamp"),
    )

    def __repr__(self):
        return f"<OptionsRatioHistory {self.ticker} {self.timestamp} ratio={self.ratio:.3f}>"
