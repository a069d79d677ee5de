"""
Market Hours Utility

Handles US/Eastern timezone and NYSE regular-session timing.
"""

from datetime import datetime, date
from enum import Enum
from typing import Optional
import pytz

ET = pytz.timezone("America/New_York")

# Market timing (ET)
MARKET_OPEN = "09:30"
MARKET_CLOSE = "16:00"
SESSION_MINUTES = 390  # 6.5 hours


class MarketSession(str, Enum):
    PRE_MARKET = "PRE_MARKET"
    REGULAR = "REGULAR"
    CLOSED = "CLOSED"


def get_et_now() -> datetime:
    """Get current time in US/Eastern."""
    return datetime.now(ET)


def to_et(dt: datetime) -> datetime:
    """Convert an aware datetime to US/Eastern; naive values are taken as ET."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(ET)


def is_weekend(dt: date) -> bool:
    """Check if date is a weekend."""
    return dt.weekday() >= 5  # Saturday = 5, Sunday = 6


def get_market_session(dt: Optional[datetime] = None) -> MarketSession:
    """Get current market session."""
    dt = get_et_now() if dt is None else to_et(dt)

    if is_weekend(dt.date()):
        return MarketSession.CLOSED

    time_str = dt.strftime("%H:%M")

    if time_str < MARKET_OPEN:
        return MarketSession.PRE_MARKET
    elif time_str < MARKET_CLOSE:
        return MarketSession.REGULAR
    else:
        return MarketSession.CLOSED


def is_market_open(dt: Optional[datetime] = None) -> bool:
    """Check if the regular session is currently open."""
    return get_market_session(dt) == MarketSession.REGULAR


def minutes_since_open(dt: Optional[datetime] = None) -> float:
    """Minutes elapsed since today's open, 0 outside the regular session."""
    dt = get_et_now() if dt is None else to_et(dt)

    if not is_market_open(dt):
        return 0.0

    hour, minute = (int(part) for part in MARKET_OPEN.split(":"))
    opened = dt.replace(hour=hour, minute=minute, second=0, microsecond=0)
    return (dt - opened).total_seconds() / 60
