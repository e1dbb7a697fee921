"""Entry point for the MCP database query gateway.

Serves the query, schema and procedure tools over the MCP stdio transport.

Usage:
    python main.py

Configuration is read from the environment (and ``.env``); see
``core.config``. Logs go to stderr because stdout carries the protocol.
"""

import asyncio
import logging
import signal
import sys

from core.dependencies import get_app_config, shutdown_gateway

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


async def run_stdio_mode():
    """Run the STDIO server until stdin closes or SIGINT/SIGTERM arrives."""
    from protocol.stdio_server import run_stdio_server

    app_config = get_app_config()
    logger.info(f"Starting {app_config.server_name} in STDIO mode")

    server_task = asyncio.create_task(run_stdio_server(app_config))
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, server_task.cancel)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        await server_task
    except asyncio.CancelledError:
        logger.info("Shutdown signal received")
    finally:
        await shutdown_gateway()
        logger.info("Graceful shutdown completed")


def main():
    """Main entry point."""
    try:
        app_config = get_app_config()
    except Exception as e:
        configure_logging()
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    configure_logging(app_config.log_level)

    try:
        asyncio.run(run_stdio_mode())
    except Exception as e:
        logger.error(f"STDIO server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
