"""Ad-hoc query execution handler with security validation."""

import logging
from typing import Any, Dict, List, Optional

from core.config import QueryConfig
from core.exceptions import InternalToolError, InvalidParamsError, MCPDBError
from tools.base import ToolCall, ToolHandler
from tools.definitions import TOOL_EXECUTE_QUERY
from tools.validators import SQLValidator

logger = logging.getLogger(__name__)


class QueryHandler(ToolHandler):
    """Handler for ``execute_query``."""

    def __init__(self, query_config: Optional[QueryConfig] = None):
        self.query_config = query_config or QueryConfig()

    @property
    def tool_names(self) -> List[str]:
        return [TOOL_EXECUTE_QUERY]

    async def handle(self, call: ToolCall, gateway: Any) -> Dict[str, Any]:
        """
        Validate and execute one SQL statement.

        Nothing reaches the gateway unless every check passes.

        Args:
            call: Tool call with ``query``, ``parameters`` and
                ``allowWriteOperations`` arguments
            gateway: Connection gateway instance

        Returns:
            Rows of the first result set and the affected-row count
        """
        query = self._required_string(call.arguments, "query")
        parameters = self._parameters(call.arguments)
        allow_write = call.arguments.get("allowWriteOperations", False)
        if not isinstance(allow_write, bool):
            raise InvalidParamsError("allowWriteOperations must be a boolean")

        validation = SQLValidator.validate_query(
            query,
            allow_write=allow_write,
            max_length=self.query_config.max_query_length
        )
        if not validation.is_valid:
            logger.warning(f"Query blocked by security validation: {'; '.join(validation.errors)}")
            raise InvalidParamsError(f"Query validation failed: {', '.join(validation.errors)}")

        try:
            result = await gateway.execute_query(query, parameters)
        except MCPDBError as e:
            raise InternalToolError(f"Query execution failed: {e.message}", details=e.details) from e

        return {
            "success": True,
            "recordset": result.recordset,
            "rowsAffected": result.rows_affected,
            "recordCount": len(result.recordset)
        }
