from __future__ import annotations

import logging
import sys


FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the server process.

    Logs go to stderr: stdout carries the MCP stdio transport.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT))
    root_logger.addHandler(handler)

    # Reduce noise from the MCP library.
    logging.getLogger("mcp").setLevel(logging.WARNING)

    root_logger.debug("Logging configured at %s", logging.getLevelName(log_level))
