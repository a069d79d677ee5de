"""
FRED Data Adapter

Macro series from the St. Louis Fed observations API.
"""

import logging
from datetime import datetime
from typing import Optional

from marketdash.core.config import settings
from marketdash.schemas.market import MacroType, TimeSeriesPoint
from marketdash.services.base import ExternalAPIError
from marketdash.services.data_sources.http_client import HTTPSource
from marketdash.services.data_sources.interface import MacroSource

logger = logging.getLogger(__name__)

# series_id, units, newest observations to fetch
FRED_SERIES = {
    MacroType.CPI: ("CPIAUCSL", "pc1", 240),  # CPI YoY %, 20 years monthly
    MacroType.JOBLESS: ("ICSA", "lin", 520),  # Initial claims, 10 years weekly
}
CPI_INDEX_SERIES = ("CPIAUCSL", "lin", None)

# FRED marks missing observations with "."
MISSING_VALUE = "."


def parse_observations(payload: dict) -> list[TimeSeriesPoint]:
    """Observations payload to ascending points, skipping missing values."""
    points = []
    for obs in payload.get("observations") or []:
        raw = obs.get("value")
        if raw is None or raw == MISSING_VALUE:
            continue
        try:
            points.append(
                TimeSeriesPoint(
                    date=datetime.strptime(obs["date"], "%Y-%m-%d").date(),
                    value=float(raw),
                )
            )
        except (KeyError, ValueError) as e:
            logger.debug(f"Skipping malformed FRED observation {obs}: {e}")

    points.sort(key=lambda p: p.date)
    return points


class FredMacroSource(HTTPSource, MacroSource):
    """CPI (YoY and index level) and initial jobless claims."""

    source_name = "FRED"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(timeout_seconds)
        self.api_key = api_key if api_key is not None else settings.fred_api_key
        self.base_url = (base_url or settings.fred_base_url).rstrip("/")

    @property
    def name(self) -> str:
        return self.source_name

    async def _fetch_series(
        self, series_id: str, units: str, limit: Optional[int]
    ) -> list[TimeSeriesPoint]:
        if not self.api_key:
            raise ExternalAPIError(self.source_name, "FRED API key is not configured")

        params = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
            "units": units,
            "sort_order": "desc",
        }
        if limit:
            params["limit"] = limit

        payload = await self.get_json(
            f"{self.base_url}/series/observations",
            params=params,
            label=f"FRED {series_id} ({units})",
        )
        points = parse_observations(payload)
        logger.info(f"Fetched {len(points)} observations for {series_id} ({units})")
        return points

    async def get_series(self, macro_type: MacroType) -> list[TimeSeriesPoint]:
        series_id, units, limit = FRED_SERIES[macro_type]
        return await self._fetch_series(series_id, units, limit)

    async def get_cpi_index(self) -> list[TimeSeriesPoint]:
        return await self._fetch_series(*CPI_INDEX_SERIES)
