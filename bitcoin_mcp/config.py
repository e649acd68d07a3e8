"""Configuration for the Bitcoin MCP server."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CoinGeckoConfig:
    base_url: str = "https://api.coingecko.com/api/v3"
    timeout_seconds: float = 10.0


@dataclass
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    decode_responses: bool = True


@dataclass
class PubSubConfig:
    request_channel: str = "bitcoin_mcp:requests"
    response_channel: str = "bitcoin_mcp:responses"
    enabled: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class ServerConfig:
    name: str = "mcp-bitcoin-server"
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    pubsub: PubSubConfig = field(default_factory=PubSubConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG = ServerConfig()


def config_from_env(*, pubsub_enabled: bool = True) -> ServerConfig:
    """Build a ServerConfig from environment variables.

    Only the worker entry point reads the environment; the stdio server runs
    on DEFAULT_CONFIG.
    """
    defaults = ServerConfig()
    return ServerConfig(
        coingecko=CoinGeckoConfig(
            base_url=os.getenv("COINGECKO_BASE_URL", defaults.coingecko.base_url),
            timeout_seconds=float(os.getenv("COINGECKO_TIMEOUT", str(defaults.coingecko.timeout_seconds))),
        ),
        redis=RedisConfig(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", "6379")),
            db=int(os.getenv("REDIS_DB", "0")),
            password=os.getenv("REDIS_PASSWORD"),
        ),
        pubsub=PubSubConfig(
            enabled=pubsub_enabled,
            request_channel=os.getenv("REQUEST_CHANNEL", defaults.pubsub.request_channel),
            response_channel=os.getenv("RESPONSE_CHANNEL", defaults.pubsub.response_channel),
        ),
        logging=LoggingConfig(level=os.getenv("LOG_LEVEL", defaults.logging.level).upper()),
    )
