"""MCP tools package for the database query gateway."""

from tools.base import ToolCall, ToolHandler
from tools.registry import ToolRegistry
from tools.definitions import get_all_tools
from tools.validators import SQLValidator, InputValidator, ValidationResult

__all__ = [
    'ToolCall',
    'ToolHandler',
    'ToolRegistry',
    'get_all_tools',
    'SQLValidator',
    'InputValidator',
    'ValidationResult',
]
