import logging
import sys

from bitcoin_mcp.config import LoggingConfig
from bitcoin_mcp.logging_setup import setup_logging


def test_logs_to_stderr_at_configured_level():
    logger = setup_logging(LoggingConfig(level="debug"))

    assert logger.name == "bitcoin_mcp"
    assert logger.level == logging.DEBUG
    handlers = logging.getLogger().handlers
    assert any(getattr(h, "stream", None) is sys.stderr for h in handlers)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    assert setup_logging(LoggingConfig(level="chatty")).level == logging.INFO
