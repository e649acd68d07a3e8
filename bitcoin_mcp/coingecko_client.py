"""CoinGecko market-data client using httpx."""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from .config import DEFAULT_CONFIG, ServerConfig
from .errors import MalformedResponseError, NetworkTimeoutError, NoResponseError, UpstreamStatusError
from .models import CoinQuote, MarketQuoteParams

logger = logging.getLogger(__name__)

MARKETS_PATH = "/coins/markets"


class CoinGeckoClient:
    """Thin async wrapper around CoinGecko's ``coins/markets`` endpoint.

    Every call opens its own ``httpx.AsyncClient`` and issues exactly one GET;
    nothing is retried or cached.
    """

    def __init__(
        self,
        *,
        config: ServerConfig = DEFAULT_CONFIG,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = config.coingecko.base_url.rstrip("/")
        self._timeout = config.coingecko.timeout_seconds
        self._transport = transport

    @property
    def markets_url(self) -> str:
        return f"{self._base_url}{MARKETS_PATH}"

    def market_params(self, *, sparkline: Optional[bool] = False, ids: Optional[str] = None) -> MarketQuoteParams:
        """Fixed query template; only ``sparkline`` and ``ids`` vary per capability."""
        return MarketQuoteParams(sparkline=sparkline, ids=ids)

    async def fetch_market_quotes(self, params: MarketQuoteParams) -> List[CoinQuote]:
        """Fetch one page of coin records ordered by market cap."""
        query = params.to_query()
        logger.debug("GET %s params=%s", self.markets_url, query)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self.markets_url, params=query)
        except httpx.TimeoutException as exc:
            raise NetworkTimeoutError(f"Request timed out after {self._timeout}s") from exc
        except httpx.RequestError as exc:
            raise NoResponseError(str(exc)) from exc

        if not response.is_success:
            raise UpstreamStatusError(response.status_code, response.reason_phrase)

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Response body is not valid JSON") from exc

        if not isinstance(body, list):
            raise MalformedResponseError(f"Expected a JSON array, got {type(body).__name__}")
        if not all(isinstance(item, dict) for item in body):
            raise MalformedResponseError("Expected every coin record to be a JSON object")

        logger.debug("Received %d coin records", len(body))
        return [CoinQuote(item) for item in body]
