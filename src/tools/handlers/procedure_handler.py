"""Stored procedure execution handler."""

import logging
from typing import Any, Dict, List

from core.exceptions import InternalToolError, InvalidParamsError, MCPDBError
from database.binding import normalize_parameters
from database.schema import SchemaIntrospector
from tools.base import ToolCall, ToolHandler
from tools.definitions import TOOL_EXECUTE_STORED_PROCEDURE
from tools.validators import InputValidator, SQLValidator

logger = logging.getLogger(__name__)


class ProcedureHandler(ToolHandler):
    """Handler for ``execute_stored_procedure``."""

    @property
    def tool_names(self) -> List[str]:
        return [TOOL_EXECUTE_STORED_PROCEDURE]

    async def handle(self, call: ToolCall, gateway: Any) -> Dict[str, Any]:
        """
        Execute a stored procedure after checking its arguments.

        Supplied values are checked against the procedure's declared
        parameter types; names the procedure does not declare are rejected.

        Args:
            call: Tool call with ``procedureName`` and ``parameters``
            gateway: Connection gateway instance

        Returns:
            Every result set, the output values and affected-row counts
        """
        procedure_name = self._required_string(call.arguments, "procedureName")
        if not SQLValidator.is_valid_procedure_name(procedure_name):
            raise InvalidParamsError(f"Invalid procedure name: {procedure_name}")

        parameters = normalize_parameters(self._parameters(call.arguments))
        schema_name, _, routine_name = procedure_name.rpartition(".")

        try:
            if parameters:
                await self._check_declared_types(
                    SchemaIntrospector(gateway), routine_name, schema_name or None, parameters
                )
            result = await gateway.execute_procedure(procedure_name, parameters)
        except InvalidParamsError:
            raise
        except MCPDBError as e:
            raise InternalToolError(f"Stored procedure execution failed: {e.message}", details=e.details) from e

        return {
            "success": True,
            "recordset": result.recordset,
            "recordsets": result.recordsets,
            "output": result.output,
            "rowsAffected": result.rows_affected,
            "recordCount": len(result.recordset)
        }

    @staticmethod
    async def _check_declared_types(
        introspector: SchemaIntrospector,
        routine_name: str,
        schema_name: str,
        parameters: Dict[str, Any]
    ):
        declared = {
            parameter.parameter_name.lstrip("@").lower(): parameter
            for parameter in await introspector.get_routine_parameters(routine_name, schema_name)
        }

        for name, value in parameters.items():
            parameter = declared.get(name.lower())
            if parameter is None:
                raise InvalidParamsError(f"Unknown parameter for {routine_name}: {name}")
            if not InputValidator.validate_parameter(value, parameter.data_type):
                raise InvalidParamsError(
                    f"Invalid value for parameter {name}: expected {parameter.data_type}"
                )
