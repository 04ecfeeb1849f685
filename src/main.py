"""
Settings admin MCP server - Main entry point
Serves the settings and captcha verification tools over MCP stdio
"""
import asyncio

import structlog

from .config.mcp_logger import configure_mcp_logging
from .config.settings import load_app_config
from .mcp_server.server import create_server


logger = structlog.get_logger()


async def main():
    """Main with dependency injection"""
    # Load configuration
    app_config = load_app_config()
    configure_mcp_logging(app_config.log_level)

    server = create_server(app_config)

    try:
        await server.run_stdio_async()
    except KeyboardInterrupt:
        logger.info("shutting_down")


def run():
    """Entry point for the console script"""
    asyncio.run(main())


if __name__ == "__main__":
    run()
