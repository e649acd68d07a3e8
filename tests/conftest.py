import copy
from typing import Any, List, Optional

import httpx
import pytest

from bitcoin_mcp.coingecko_client import CoinGeckoClient
from bitcoin_mcp.config import ServerConfig
from bitcoin_mcp.handlers import CapabilityHandlers


def _coin(coin_id, symbol, name, change, **extra):
    coin = {
        "id": coin_id,
        "symbol": symbol,
        "name": name,
        "current_price": 1.0,
        "market_cap": 1000,
        "price_change_percentage_24h": change,
    }
    coin.update(extra)
    return coin


# Market-cap-desc order, as CoinGecko returns it.
SAMPLE_COINS: List[dict] = [
    _coin("bitcoin", "btc", "Bitcoin", 5.0, ath=73738, roi=None),
    _coin("ethereum", "eth", "Ethereum", -3.0),
    _coin("tether", "usdt", "Tether", 0.01),
    _coin("binancecoin", "bnb", "BNB", 2.5),
    _coin("solana", "sol", "Solana", -7.2),
    _coin("ripple", "xrp", "XRP", None),
    _coin("cardano", "ada", "Cardano", 1.1),
    _coin("wrapped-bitcoin", "wbtc", "Wrapped Bitcoin", 4.9),
]


def market_transport(
    payload: Any = None,
    *,
    status: int = 200,
    content: Optional[bytes] = None,
    requests: Optional[list] = None,
    exc: Optional[type] = None,
) -> httpx.MockTransport:
    """MockTransport answering every request with the given payload, status or exception."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if exc is not None:
            raise exc("simulated failure", request=request)
        if content is not None:
            return httpx.Response(status, content=content)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


def make_handlers(transport: httpx.MockTransport, config: Optional[ServerConfig] = None) -> CapabilityHandlers:
    client = CoinGeckoClient(config=config or ServerConfig(), transport=transport)
    return CapabilityHandlers(client)


@pytest.fixture
def coins() -> List[dict]:
    return copy.deepcopy(SAMPLE_COINS)
