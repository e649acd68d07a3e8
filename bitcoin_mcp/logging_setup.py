"""Logging configuration for the Bitcoin MCP server.

stdout carries the MCP stdio protocol, so log records always go to stderr.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

from .config import LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Configure root logging and return the package logger."""
    config = config or LoggingConfig()
    level = getattr(logging, config.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=config.format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    logger = logging.getLogger("bitcoin_mcp")
    logger.setLevel(level)
    return logger
