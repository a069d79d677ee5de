"""
multpl Earnings Adapter

S&P 500 real (inflation-adjusted) 12-month earnings per share, scraped
from multpl.com's monthly table.
"""

import logging
import re
from datetime import datetime
from typing import Optional

from marketdash.core.config import settings
from marketdash.schemas.market import EarningsPoint
from marketdash.services.data_sources.http_client import HTTPSource
from marketdash.services.data_sources.interface import EarningsSource

logger = logging.getLogger(__name__)

ROW_PATTERN = re.compile(
    r"<tr[^>]*>\s*<td[^>]*>(.*?)</td>\s*<td[^>]*>(.*?)</td>\s*</tr>",
    re.DOTALL,
)
TAG_PATTERN = re.compile(r"<[^>]+>")
DATE_FORMATS = ("%b %d, %Y", "%B %d, %Y")


def _clean_cell(cell: str) -> str:
    cell = TAG_PATTERN.sub("", cell)
    cell = cell.replace("&nbsp;", " ").replace("&#x2002;", "")
    return re.sub(r"\s+", " ", cell).strip()


def _parse_date(text: str) -> Optional[datetime]:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_earnings_table(html: str) -> list[EarningsPoint]:
    """Extract (date, value) rows from the table; header rows are skipped."""
    points = []
    for raw_date, raw_value in ROW_PATTERN.findall(html):
        date_text = _clean_cell(raw_date)
        if "date" in date_text.lower():
            continue

        when = _parse_date(date_text)
        try:
            value = float(_clean_cell(raw_value).split(" ")[0].replace(",", ""))
        except (ValueError, IndexError):
            continue

        if when is not None:
            points.append(EarningsPoint(date=when.date(), value=value))

    points.sort(key=lambda p: p.date)
    return points


class MultplEarningsSource(HTTPSource, EarningsSource):
    """Index-level real earnings. The ticker argument is ignored."""

    source_name = "multpl"

    def __init__(self, url: Optional[str] = None, timeout_seconds: Optional[float] = None):
        super().__init__(timeout_seconds)
        self.url = url or settings.multpl_earnings_url

    @property
    def name(self) -> str:
        return self.source_name

    async def get_earnings_history(self, ticker: str) -> list[EarningsPoint]:
        html = await self.get_text(self.url, label="multpl S&P 500 earnings")
        points = parse_earnings_table(html)
        logger.info(f"Fetched {len(points)} earnings records from multpl")
        return points
