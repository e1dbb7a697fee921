"""Custom exceptions for the MCP query gateway."""

from mcp.types import ErrorData, INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND


class MCPDBError(Exception):
    """Base exception for all query gateway errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging and responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(MCPDBError):
    """Exception raised when configuration is invalid."""
    pass


class DatabaseConnectionError(MCPDBError):
    """Exception raised when the connection pool cannot be established."""
    pass


class QueryExecutionError(MCPDBError):
    """Exception raised when the driver rejects or fails a statement."""
    pass


class ToolError(MCPDBError):
    """Error reported back to the tool-calling client.

    ``kind`` is the machine-readable category, ``code`` the matching
    JSON-RPC error code.
    """

    kind = "InternalError"
    code = INTERNAL_ERROR

    def to_error_data(self) -> ErrorData:
        return ErrorData(code=self.code, message=self.message, data={"kind": self.kind})


class InvalidParamsError(ToolError):
    """Missing or malformed argument, or a failed validator."""

    kind = "InvalidParams"
    code = INVALID_PARAMS


class NotFoundError(ToolError):
    """Unknown tool or unknown database object."""

    kind = "NotFound"
    code = METHOD_NOT_FOUND


class InternalToolError(ToolError):
    """Driver or execution failure surfaced to the client."""

    kind = "InternalError"
    code = INTERNAL_ERROR
