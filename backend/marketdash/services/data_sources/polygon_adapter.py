"""
Polygon Options Adapter

Options chain snapshots, one cursor page at a time. The cursor handed back
to callers is Polygon's `next_url`; the API key is re-attached on each
follow-up request because next_url never carries it.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from marketdash.core.config import settings
from marketdash.schemas.market import ContractType, OptionContract, OptionsPage
from marketdash.services.base import ExternalAPIError
from marketdash.services.data_sources.http_client import HTTPSource
from marketdash.services.data_sources.interface import OptionsSource

logger = logging.getLogger(__name__)


def _number(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_contract(result: dict) -> Optional[OptionContract]:
    """Normalize one snapshot result; None when strike or type is unusable."""
    details = result.get("details") or {}
    strike = _number(details.get("strike_price"))
    raw_type = (details.get("contract_type") or "").lower()

    if strike is None or strike <= 0 or raw_type not in (ContractType.CALL.value, ContractType.PUT.value):
        return None

    day = result.get("day") or {}
    last_quote = result.get("last_quote") or {}
    last_trade = result.get("last_trade") or {}

    try:
        return OptionContract(
            strike=strike,
            contract_type=ContractType(raw_type),
            open_interest=max(_number(result.get("open_interest")) or 0.0, 0.0),
            day_timestamp_ms=_number(day.get("t")),
            last_quote_ns=_number(last_quote.get("sip_timestamp")),
            last_trade_ns=_number(last_trade.get("sip_timestamp")),
        )
    except PydanticValidationError as e:
        logger.debug(f"Skipping contract {details.get('ticker')}: {e}")
        return None


class PolygonOptionsSource(HTTPSource, OptionsSource):
    """Polygon v3 options snapshot endpoint."""

    source_name = "Polygon"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        page_limit: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(timeout_seconds)
        self.api_key = api_key if api_key is not None else settings.polygon_api_key
        self.base_url = (base_url or settings.polygon_base_url).rstrip("/")
        self.page_limit = page_limit or settings.options_page_limit

    async def get_options_page(
        self, ticker: str, cursor: Optional[str] = None
    ) -> OptionsPage:
        if not self.api_key:
            raise ExternalAPIError(self.source_name, "POLYGON_API_KEY is not configured")

        if cursor is None:
            url = f"{self.base_url}/{ticker}"
            params = {"apiKey": self.api_key, "limit": self.page_limit}
        else:
            separator = "&" if "?" in cursor else "?"
            url = f"{cursor}{separator}apiKey={self.api_key}"
            params = None

        payload = await self.get_json(
            url, params=params, label=f"Polygon options {ticker}"
        )

        results = payload.get("results")
        if not results:
            logger.warning(f"No results in options page for {ticker}")
            return OptionsPage(fetched_at=datetime.now(timezone.utc))

        contracts = []
        for result in results:
            contract = parse_contract(result)
            if contract is not None:
                contracts.append(contract)

        logger.debug(f"Fetched {len(results)} option records for {ticker}")
        return OptionsPage(
            contracts=contracts,
            next_cursor=payload.get("next_url") or None,
            fetched_at=datetime.now(timezone.utc),
        )
