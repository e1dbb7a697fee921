"""Schema introspection handlers."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from core.config import QueryConfig
from core.exceptions import InternalToolError, InvalidParamsError, MCPDBError, NotFoundError
from database.schema import SchemaIntrospector
from tools.base import ToolCall, ToolHandler
from tools.definitions import (
    TOOL_GET_DATABASE_METADATA,
    TOOL_GET_TABLE_DATA,
    TOOL_GET_TABLE_SCHEMA,
    TOOL_LIST_TABLES,
    TOOL_SEARCH_COLUMNS,
)
from tools.validators import InputValidator

logger = logging.getLogger(__name__)


class SchemaHandler(ToolHandler):
    """Handler for table, column and whole-database introspection tools."""

    def __init__(self, query_config: Optional[QueryConfig] = None):
        self.query_config = query_config or QueryConfig()

    @property
    def tool_names(self) -> List[str]:
        return [
            TOOL_GET_TABLE_SCHEMA,
            TOOL_LIST_TABLES,
            TOOL_GET_DATABASE_METADATA,
            TOOL_GET_TABLE_DATA,
            TOOL_SEARCH_COLUMNS,
        ]

    async def handle(self, call: ToolCall, gateway: Any) -> Dict[str, Any]:
        """Route schema tool requests."""
        introspector = SchemaIntrospector(gateway)

        if call.name == TOOL_GET_TABLE_SCHEMA:
            return await self._get_table_schema(call.arguments, introspector)
        elif call.name == TOOL_LIST_TABLES:
            return await self._list_tables(introspector)
        elif call.name == TOOL_GET_DATABASE_METADATA:
            return await self._get_database_metadata(introspector)
        elif call.name == TOOL_GET_TABLE_DATA:
            return await self._get_table_data(call.arguments, introspector)
        elif call.name == TOOL_SEARCH_COLUMNS:
            return await self._search_columns(call.arguments, introspector)

        raise NotFoundError(f"Unknown tool: {call.name}")

    def _table_arguments(self, arguments: Dict[str, Any]) -> Tuple[str, Optional[str]]:
        """Sanitized ``(table, schema)``; ``schema.table`` is split when no schema is given."""
        table_name = InputValidator.sanitize_identifier(self._required_string(arguments, "tableName"))
        schema_name = InputValidator.sanitize_identifier(self._optional_string(arguments, "schemaName"))

        if not schema_name and "." in table_name:
            schema_name, _, table_name = table_name.rpartition(".")

        if not table_name:
            raise InvalidParamsError("tableName must contain a valid identifier")
        return table_name, schema_name or None

    async def _get_table_schema(self, arguments: Dict[str, Any], introspector: SchemaIntrospector) -> Dict[str, Any]:
        table_name, schema_name = self._table_arguments(arguments)

        try:
            table_schema = await introspector.get_table_schema(table_name, schema_name)
        except MCPDBError as e:
            raise InternalToolError(f"Failed to get table schema: {e.message}", details=e.details) from e

        if table_schema is None:
            raise NotFoundError(f"Table {schema_name or introspector.gateway.default_schema}.{table_name} not found")

        return {
            "success": True,
            "schema": table_schema.model_dump(by_alias=True)
        }

    async def _list_tables(self, introspector: SchemaIntrospector) -> Dict[str, Any]:
        try:
            tables = await introspector.list_tables()
        except MCPDBError as e:
            raise InternalToolError(f"Failed to list tables: {e.message}", details=e.details) from e

        return {
            "success": True,
            "tables": tables,
            "count": len(tables)
        }

    async def _get_database_metadata(self, introspector: SchemaIntrospector) -> Dict[str, Any]:
        try:
            metadata = await introspector.get_database_metadata()
        except MCPDBError as e:
            raise InternalToolError(f"Failed to get database metadata: {e.message}", details=e.details) from e

        return {
            "success": True,
            "metadata": metadata.counts(),
            "details": metadata.model_dump(by_alias=True)
        }

    async def _get_table_data(self, arguments: Dict[str, Any], introspector: SchemaIntrospector) -> Dict[str, Any]:
        table_name, schema_name = self._table_arguments(arguments)

        limit = arguments.get("limit", self.query_config.sample_row_limit)
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidParamsError("limit must be an integer")
        limit = InputValidator.clamp_limit(limit, self.query_config.max_sample_row_limit)

        try:
            rows = await introspector.get_sample_rows(table_name, schema_name, limit)
        except MCPDBError as e:
            raise InternalToolError(f"Failed to get table data: {e.message}", details=e.details) from e

        full_name = f"{schema_name or introspector.gateway.default_schema}.{table_name}"
        if rows is None:
            raise NotFoundError(f"Table {full_name} not found")

        return {
            "success": True,
            "table": full_name,
            "rows": rows,
            "recordCount": len(rows)
        }

    async def _search_columns(self, arguments: Dict[str, Any], introspector: SchemaIntrospector) -> Dict[str, Any]:
        pattern = InputValidator.sanitize_identifier(self._required_string(arguments, "pattern"))
        if not pattern:
            raise InvalidParamsError("pattern must contain identifier characters")

        try:
            columns = await introspector.search_columns(pattern)
        except MCPDBError as e:
            raise InternalToolError(f"Failed to search columns: {e.message}", details=e.details) from e

        return {
            "success": True,
            "columns": columns,
            "count": len(columns)
        }
