"""MCP-compatible logger configuration.

This module configures structlog to output JSON-formatted logs on stderr so
they never interfere with the MCP stdio protocol on stdout.
"""

import logging
import os
import sys
from typing import Optional

import structlog


def configure_mcp_logging(level: Optional[str] = None) -> None:
    """Configure structlog for MCP server compatibility.

    MCP servers communicate via JSON-RPC over stdio. Any non-JSON output to
    stdout breaks the protocol, so every log line is rendered as JSON and
    written to stderr.

    Args:
        level: Minimum log level name (e.g. "INFO"). Falls back to the
            LOG_LEVEL environment variable, then INFO.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        stream=sys.stderr,
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    structlog.configure(
        processors=[
            # PrintLogger has no stdlib level, filter with the bound wrapper instead
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# Configure logging when module is imported
configure_mcp_logging()

# Export configured logger
logger = structlog.get_logger()
