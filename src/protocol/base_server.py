"""Base MCP server - transport-agnostic MCP protocol wiring.

Binds the MCP ``list_tools`` / ``call_tool`` requests to a ``ToolRegistry``
so any transport can serve the same tools.
"""

import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.types import TextContent, Tool

from core.config import QueryConfig
from tools import ToolCall, ToolRegistry

logger = logging.getLogger(__name__)


class BaseMCPServer:
    """Base MCP server providing core protocol functionality.

    This class encapsulates the MCP protocol logic independent of
    the transport mechanism.
    """

    def __init__(
        self,
        gateway: Any,
        server_name: str = "mssql-mcp",
        query_config: Optional[QueryConfig] = None
    ):
        """Initialize base MCP server.

        Args:
            gateway: Connection gateway handed to every tool
            server_name: Name of the MCP server
            query_config: Query length and sampling limits
        """
        self.gateway = gateway
        self.registry = ToolRegistry(gateway, query_config)
        self.server = Server(server_name)
        self._setup_handlers()
        logger.info(f"Initialized {server_name} MCP server")

    def _setup_handlers(self):
        """Setup MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            """List all available tools."""
            return self.registry.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
            """Handle tool execution."""
            return await self.call_tool(name, arguments)

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> List[TextContent]:
        """Dispatch one tool call and convert the result to MCP content."""
        result = await self.registry.handle_tool(ToolCall(name=name, arguments=arguments or {}))
        return [TextContent(type="text", text=item["text"]) for item in result["content"]]
