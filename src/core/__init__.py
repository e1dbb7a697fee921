"""Core modules for the MCP query gateway."""

from .exceptions import (
    MCPDBError,
    ConfigurationError,
    DatabaseConnectionError,
    QueryExecutionError,
    ToolError,
    InvalidParamsError,
    NotFoundError,
    InternalToolError
)

__all__ = [
    "MCPDBError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "QueryExecutionError",
    "ToolError",
    "InvalidParamsError",
    "NotFoundError",
    "InternalToolError"
]
