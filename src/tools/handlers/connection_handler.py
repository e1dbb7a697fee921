"""Connection testing handler."""

import logging
from typing import Any, Dict, List

from database.schema import get_catalog
from tools.base import ToolCall, ToolHandler
from tools.definitions import TOOL_TEST_CONNECTION

logger = logging.getLogger(__name__)


class ConnectionHandler(ToolHandler):
    """Handler for database connection testing."""

    @property
    def tool_names(self) -> List[str]:
        return [TOOL_TEST_CONNECTION]

    async def handle(self, call: ToolCall, gateway: Any) -> Dict[str, Any]:
        """
        Connect if needed and run a trivial query.

        Failures are reported in the payload instead of raised, so health
        checks never see a tool error.

        Args:
            call: Tool call (no arguments)
            gateway: Connection gateway instance

        Returns:
            Connection status with the probe row on success
        """
        try:
            await gateway.connect()
            result = await gateway.execute_query(get_catalog(gateway.db_type).ping)
        except Exception as e:
            logger.warning(f"Connection test failed: {e}")
            return {
                "success": False,
                "connected": False,
                "message": "Database connection failed",
                "error": str(e)
            }

        return {
            "success": True,
            "connected": True,
            "message": "Database connection is healthy",
            "testResult": result.recordset[0] if result.recordset else None
        }
