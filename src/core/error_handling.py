"""Response and error formatting at the tool dispatch boundary.

Payloads become MCP text content holding JSON; failures become ``McpError``
with a JSON-RPC code and a ``kind`` tag in the error data.
"""

import base64
import json
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID

from mcp.shared.exceptions import McpError
from mcp.types import ErrorData, INTERNAL_ERROR

from core.exceptions import ToolError

logger = logging.getLogger(__name__)


def json_default(value: Any) -> Any:
    """Convert driver values that ``json`` cannot encode natively."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        # Finite integral decimals become ints; fractions, NaN and Infinity stay strings
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if hasattr(value, "model_dump"):
        return value.model_dump(by_alias=True)
    return str(value)


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=json_default)


def format_success_response(data: Any) -> Dict[str, Any]:
    """Wrap a payload in MCP text content.

    Args:
        data: Payload dict (or pre-rendered text)

    Returns:
        MCP content dict
    """
    text = data if isinstance(data, str) else to_json(data)
    return {
        "content": [{
            "type": "text",
            "text": text
        }]
    }


def to_mcp_error(error: Exception, tool_name: str) -> McpError:
    """Map any exception raised below the dispatcher to an ``McpError``.

    ``ToolError`` keeps its kind and message. Anything else is logged with
    its traceback and reported as an internal error carrying only the
    message.
    """
    if isinstance(error, McpError):
        return error

    if isinstance(error, ToolError):
        logger.warning(f"Tool {tool_name} failed ({error.kind}): {error.message}")
        return McpError(error.to_error_data())

    logger.error(f"Error executing tool {tool_name}: {error}", exc_info=True)
    return McpError(ErrorData(
        code=INTERNAL_ERROR,
        message=f"Failed to execute tool {tool_name}: {error}",
        data={"kind": "InternalError"}
    ))
