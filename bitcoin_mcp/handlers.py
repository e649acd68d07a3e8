"""Capability handlers: validate, fetch, transform, wrap."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .coingecko_client import CoinGeckoClient
from .errors import InvalidInputError, MalformedResponseError, operation
from .models import CoinQuote, Content, PromptMessage, ResourceContent

logger = logging.getLogger(__name__)

ALL_CRYPTOS_URI = "crypto://all"
JSON_MIME_TYPE = "application/json"
SUMMARY_TYPES = ("top5", "gainers", "losers")
SUMMARY_SIZE = 5


def filter_by_name_or_symbol(quotes: List[CoinQuote], term: str) -> List[CoinQuote]:
    needle = term.lower()
    return [q for q in quotes if needle in q.name.lower() or needle in q.symbol.lower()]


def _change_key(descending: bool):
    # Records without a usable 24h change go last in either direction.
    def key(quote: CoinQuote) -> Tuple[int, float]:
        change = quote.price_change_percentage_24h
        if change is None:
            return 1, 0.0
        return 0, -change if descending else change

    return key


def rank_by_change(quotes: List[CoinQuote], *, descending: bool, limit: int = SUMMARY_SIZE) -> List[CoinQuote]:
    """Stable sort on a copy by 24h change, then take ``limit``."""
    return sorted(quotes, key=_change_key(descending))[:limit]


def _bad_summary_type(summary_type: str) -> InvalidInputError:
    return InvalidInputError(f"Summary type must be one of {', '.join(SUMMARY_TYPES)}, got {summary_type!r}")


def summarize(quotes: List[CoinQuote], summary_type: str) -> List[CoinQuote]:
    if summary_type == "top5":
        return quotes[:SUMMARY_SIZE]
    if summary_type == "gainers":
        return rank_by_change(quotes, descending=True)
    if summary_type == "losers":
        return rank_by_change(quotes, descending=False)
    raise _bad_summary_type(summary_type)


class CapabilityHandlers:
    """The five capabilities exposed by the server, bound to one client."""

    def __init__(self, client: CoinGeckoClient) -> None:
        self._client = client

    async def _fetch(self, *, sparkline: Optional[bool] = False, ids: Optional[str] = None) -> List[CoinQuote]:
        params = self._client.market_params(sparkline=sparkline, ids=ids)
        return await self._client.fetch_market_quotes(params)

    @operation("Fetching all cryptocurrencies")
    async def read_all_cryptos(self) -> ResourceContent:
        quotes = await self._fetch()
        return ResourceContent(uri=ALL_CRYPTOS_URI, mime_type=JSON_MIME_TYPE, payload=quotes)

    @operation("Fetching Bitcoin details")
    async def get_bitcoin_details(self) -> Content:
        quotes = await self._fetch(ids="bitcoin")
        if not quotes:
            raise MalformedResponseError("CoinGecko returned no Bitcoin record")
        return Content(quotes[0])

    @operation("Searching for cryptocurrency '{name}'")
    async def get_crypto_by_name(self, name: str) -> Content:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Cryptocurrency name cannot be empty")
        quotes = await self._fetch()
        results = filter_by_name_or_symbol(quotes, name.strip())
        logger.info("Search %r matched %d of %d coins", name, len(results), len(quotes))
        return Content({"searchTerm": name, "count": len(results), "results": results})

    @operation("Fetching all cryptocurrencies")
    async def get_all_cryptos(self) -> Content:
        quotes = await self._fetch()
        return Content({"count": len(quotes), "cryptocurrencies": quotes})

    @operation("Generating {summary_type} market summary")
    async def crypto_market_summary(self, summary_type: str) -> PromptMessage:
        if summary_type not in SUMMARY_TYPES:
            raise _bad_summary_type(summary_type)
        # sparkline is left to the upstream default here
        quotes = await self._fetch(sparkline=None)
        data = summarize(quotes, summary_type)
        return PromptMessage(role="assistant", payload={"type": summary_type, "data": data})
