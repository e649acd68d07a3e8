"""Worker entry point for Redis pub/sub mode."""
from __future__ import annotations

import asyncio
import logging
import sys

from bitcoin_mcp.config import config_from_env
from bitcoin_mcp.logging_setup import setup_logging
from bitcoin_mcp.server import start_worker

logger = logging.getLogger(__name__)


def main() -> None:
    """Start a Redis pub/sub worker configured from the environment."""
    config = config_from_env(pubsub_enabled=True)
    setup_logging(config.logging)

    try:
        asyncio.run(start_worker(config))
    except KeyboardInterrupt:
        logger.info("Worker stopped")
        sys.exit(0)


if __name__ == "__main__":
    main()
