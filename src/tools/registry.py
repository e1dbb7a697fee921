"""Tool registry for routing MCP tool calls to handlers."""

import logging
from typing import Any, Dict, List, Optional

from mcp.types import Tool

from core.config import QueryConfig
from core.error_handling import format_success_response, to_mcp_error
from core.exceptions import NotFoundError
from tools.base import ToolCall, ToolHandler
from tools.definitions import get_all_tools
from tools.handlers import (
    QueryHandler,
    ProcedureHandler,
    ConnectionHandler,
    SchemaHandler,
)

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Central registry for MCP tool handlers.

    Routes tool calls to the handler owning the tool name and is the one
    place where failures become ``McpError``.

    Args:
        gateway: Connection gateway shared by every handler
        query_config: Query length and sampling limits
    """

    def __init__(self, gateway: Any, query_config: Optional[QueryConfig] = None):
        self.gateway = gateway
        self.query_config = query_config or QueryConfig()
        self.handlers: Dict[str, ToolHandler] = {}
        self._register_handlers()

    def _register_handlers(self):
        """Register all tool handlers."""
        handlers = [
            QueryHandler(self.query_config),
            ProcedureHandler(),
            ConnectionHandler(),
            SchemaHandler(self.query_config),
        ]

        for handler in handlers:
            for tool_name in handler.tool_names:
                self.handlers[tool_name] = handler
                logger.debug(f"Registered {tool_name} -> {handler.__class__.__name__}")

        logger.info(f"✅ Registered {len(self.handlers)} MCP tools across {len(handlers)} handlers")

    def list_tools(self) -> List[Tool]:
        return get_all_tools()

    def is_tool_registered(self, tool_name: str) -> bool:
        """Check if a tool has a registered handler."""
        return tool_name in self.handlers

    async def handle_tool(self, call: ToolCall) -> Dict[str, Any]:
        """
        Route a tool call to its handler.

        Args:
            call: Tool name and arguments

        Returns:
            MCP content dict holding the JSON payload

        Raises:
            McpError: unknown tool, invalid arguments, missing object or
                any failure below this layer
        """
        try:
            handler = self.handlers.get(call.name)
            if handler is None:
                raise NotFoundError(f"Unknown tool: {call.name}")

            logger.debug(f"Routing {call.name} to {handler.__class__.__name__}")
            payload = await handler.handle(call, self.gateway)
            return format_success_response(payload)
        except Exception as e:
            raise to_mcp_error(e, call.name) from e
