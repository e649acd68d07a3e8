"""MCP server exposing CoinGecko market data."""
from __future__ import annotations

import logging
from typing import Annotated, Any, Awaitable, Callable, Dict, List, Literal, Optional

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.prompts.base import AssistantMessage, Message
from pydantic import Field

from .coingecko_client import CoinGeckoClient
from .config import DEFAULT_CONFIG, ServerConfig
from .handlers import ALL_CRYPTOS_URI, JSON_MIME_TYPE, CapabilityHandlers
from .logging_setup import setup_logging
from .pubsub import RedisPubSub

logger = logging.getLogger(__name__)

SummaryType = Literal["top5", "gainers", "losers"]


def build_handlers(
    config: ServerConfig = DEFAULT_CONFIG,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CapabilityHandlers:
    return CapabilityHandlers(CoinGeckoClient(config=config, transport=transport))


def build_server(
    config: ServerConfig = DEFAULT_CONFIG,
    *,
    handlers: Optional[CapabilityHandlers] = None,
) -> FastMCP:
    """Composition root: one client, one handler set, one FastMCP instance."""
    handlers = handlers or build_handlers(config)
    server = FastMCP(config.name)

    @server.resource(
        ALL_CRYPTOS_URI,
        name="cryptocurrencies",
        title="All Cryptocurrencies",
        description="Get top 100 cryptocurrencies by market cap from CoinGecko API",
        mime_type=JSON_MIME_TYPE,
    )
    async def cryptocurrencies() -> str:
        result = await handlers.read_all_cryptos()
        return result.text

    @server.tool(description="Get current Bitcoin market data and statistics from CoinGecko API")
    async def get_bitcoin_details() -> str:
        result = await handlers.get_bitcoin_details()
        return result.text

    @server.tool(
        description=(
            "Search for cryptocurrency data by name or symbol "
            "(case-insensitive substring match, surrounding whitespace ignored)"
        )
    )
    async def get_crypto_by_name(
        name: Annotated[str, Field(description="Name or symbol of the cryptocurrency to search for")],
    ) -> str:
        result = await handlers.get_crypto_by_name(name)
        return result.text

    @server.tool(description="Get top 100 cryptocurrencies by market cap from CoinGecko API")
    async def get_all_cryptos() -> str:
        result = await handlers.get_all_cryptos()
        return result.text

    @server.prompt(description="Summarize top cryptocurrencies or biggest movers")
    async def crypto_market_summary(
        type: Annotated[SummaryType, Field(description="Choose summary type: top5, gainers, losers")],
    ) -> List[Message]:
        result = await handlers.crypto_market_summary(type)
        return [AssistantMessage(result.text)]

    return server


def pubsub_handlers(handlers: CapabilityHandlers) -> Dict[str, Callable[..., Awaitable[Dict[str, Any]]]]:
    """Capabilities keyed by name, returning JSON-ready dicts for the pub/sub worker."""

    async def read_cryptocurrencies() -> Dict[str, Any]:
        return (await handlers.read_all_cryptos()).to_dict()

    async def get_bitcoin_details() -> Dict[str, Any]:
        return (await handlers.get_bitcoin_details()).to_dict()

    async def get_crypto_by_name(name: str) -> Dict[str, Any]:
        return (await handlers.get_crypto_by_name(name)).to_dict()

    async def get_all_cryptos() -> Dict[str, Any]:
        return (await handlers.get_all_cryptos()).to_dict()

    async def crypto_market_summary(type: str) -> Dict[str, Any]:
        return (await handlers.crypto_market_summary(type)).to_dict()

    return {
        "read_cryptocurrencies": read_cryptocurrencies,
        "get_bitcoin_details": get_bitcoin_details,
        "get_crypto_by_name": get_crypto_by_name,
        "get_all_cryptos": get_all_cryptos,
        "crypto_market_summary": crypto_market_summary,
    }


async def start_worker(
    config: ServerConfig,
    *,
    handlers: Optional[CapabilityHandlers] = None,
) -> None:
    """Serve the capabilities from Redis pub/sub instead of stdio."""
    if not config.pubsub.enabled:
        raise RuntimeError("Pub/sub is not enabled in configuration")

    handlers = handlers or build_handlers(config)
    pubsub = RedisPubSub(config.redis, config.pubsub)
    await pubsub.connect()

    for name, handler in pubsub_handlers(handlers).items():
        pubsub.register_handler(name, handler)

    logger.info("Worker started, listening on %s", config.pubsub.request_channel)

    try:
        await pubsub.start_worker()
    finally:
        await pubsub.disconnect()


def main() -> None:
    """Entry point to run the MCP server over stdio."""
    setup_logging(DEFAULT_CONFIG.logging)
    logger.info("Starting %s over stdio", DEFAULT_CONFIG.name)
    build_server(DEFAULT_CONFIG).run()


if __name__ == "__main__":  # pragma: no cover
    main()
