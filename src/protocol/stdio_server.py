"""STDIO transport MCP server."""

import logging
from typing import Optional

from mcp.server.stdio import stdio_server

from core.config import AppConfig
from core.dependencies import get_app_config, get_connection_gateway
from protocol.base_server import BaseMCPServer

logger = logging.getLogger(__name__)


class StdioMCPServer(BaseMCPServer):
    """MCP server using STDIO transport."""

    async def run(self):
        """Run the STDIO MCP server until the client closes stdin."""
        logger.info("Starting STDIO MCP server")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


async def run_stdio_server(app_config: Optional[AppConfig] = None):
    """Run STDIO MCP server with given configuration.

    The first connect is attempted eagerly; if it fails the server still
    starts and tools connect on first use.

    Args:
        app_config: App configuration (optional, defaults to env)
    """
    app_config = app_config or get_app_config()
    gateway = get_connection_gateway(app_config)

    try:
        await gateway.connect()
    except Exception as e:
        logger.warning(f"Initial database connection failed, tools will retry on first use: {e}")

    server = StdioMCPServer(gateway, app_config.server_name, app_config.query_config)
    await server.run()
