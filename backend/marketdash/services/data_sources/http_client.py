"""
Shared aiohttp session handling for the HTTP adapters.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from marketdash.core.config import settings
from marketdash.services.base import ExternalAPIError, RateLimitError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class HTTPSource:
    """Lazily-created aiohttp session plus JSON/text GET helpers."""

    source_name = "HTTP"

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout = timeout_seconds or settings.http_timeout_seconds

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"User-Agent": USER_AGENT},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get(
        self, url: str, params: Optional[dict] = None, label: str = "", as_json: bool = True
    ) -> Any:
        # label is what gets logged; urls may carry API keys
        label = label or self.source_name
        session = await self._ensure_session()
        logger.debug(f"GET {label}")

        try:
            async with session.get(url, params=params) as response:
                if response.status == 429:
                    raise RateLimitError(self.source_name, f"{label}: rate limited")
                if response.status != 200:
                    body = await response.text()
                    raise ExternalAPIError(
                        self.source_name,
                        f"{label}: HTTP {response.status}",
                        {"body": body[:200]},
                    )
                if as_json:
                    return await response.json(content_type=None)
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalAPIError(self.source_name, f"{label}: request failed: {e}") from e

    async def get_json(self, url: str, params: Optional[dict] = None, label: str = "") -> Any:
        return await self._get(url, params, label, as_json=True)

    async def get_text(self, url: str, params: Optional[dict] = None, label: str = "") -> str:
        return await self._get(url, params, label, as_json=False)
