"""Database access modules for the MCP query gateway."""

from .async_connectors import AsyncMSSQLConnector, AsyncPostgreSQLConnector, ResultSet
from .gateway import ConnectionGateway

__all__ = [
    "ConnectionGateway",
    "ResultSet",
    "AsyncMSSQLConnector",
    "AsyncPostgreSQLConnector"
]
