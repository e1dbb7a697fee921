"""Base classes for MCP tool handlers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.exceptions import InvalidParamsError
from tools.validators import InputValidator


@dataclass(frozen=True)
class ToolCall:
    """A named tool invocation with its argument record."""

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


class ToolHandler(ABC):
    """Abstract base class for MCP tool handlers.

    Handlers return a payload dict on success and raise ``ToolError``
    subclasses for failures the client should see.
    """

    @property
    @abstractmethod
    def tool_names(self) -> List[str]:
        """Return list of tool names this handler supports."""
        pass

    @abstractmethod
    async def handle(self, call: ToolCall, gateway: Any) -> Dict[str, Any]:
        """
        Handle tool invocation.

        Args:
            call: Tool name and arguments
            gateway: Connection gateway instance

        Returns:
            Payload dict, serialized to JSON by the registry
        """
        pass

    @staticmethod
    def _required_string(arguments: Dict[str, Any], name: str) -> str:
        value = arguments.get(name)
        if not value or not isinstance(value, str):
            raise InvalidParamsError(f"{name} parameter is required and must be a string")
        return value

    @staticmethod
    def _optional_string(arguments: Dict[str, Any], name: str) -> Optional[str]:
        value = arguments.get(name)
        if value is None:
            return None
        if not isinstance(value, str):
            raise InvalidParamsError(f"{name} must be a string")
        return value

    @staticmethod
    def _parameters(arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Validate the optional ``parameters`` object of a call."""
        parameters = arguments.get("parameters")
        if parameters is None:
            return {}
        if not isinstance(parameters, dict):
            raise InvalidParamsError("parameters must be an object")

        for key, value in parameters.items():
            if not InputValidator.is_identifier(key):
                raise InvalidParamsError(f"Invalid parameter name: {key}")
            if not InputValidator.is_bindable_value(value):
                raise InvalidParamsError(f"Invalid parameter value for {key}")
        return parameters
