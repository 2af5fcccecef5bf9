"""Logging setup for the MCP server process.

Stdout carries the MCP stdio transport, so every log record goes to stderr.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a stderr handler on the root logger. Safe to call more than once."""
    global _configured

    root = logging.getLogger()
    root.setLevel(level.upper())

    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # httpx logs every request at INFO, which would echo signed image URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
