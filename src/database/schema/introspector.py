"""Schema introspection engine.

Composes catalog queries issued through the connection gateway into typed
table, view and routine descriptions. It never opens a connection itself.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from database.binding import quote_identifier
from database.schema.catalog import CatalogQueries, get_catalog
from database.schema.models import (
    ColumnInfo,
    DatabaseMetadata,
    ForeignKeyInfo,
    FunctionInfo,
    IndexInfo,
    ParameterInfo,
    ProcedureInfo,
    TableSchema,
    ViewInfo,
)

logger = logging.getLogger(__name__)


def _map_column(row: Dict[str, Any]) -> ColumnInfo:
    return ColumnInfo(
        column_name=row["COLUMN_NAME"],
        data_type=row["DATA_TYPE"],
        max_length=row.get("CHARACTER_MAXIMUM_LENGTH"),
        is_nullable=row.get("IS_NULLABLE") == "YES",
        default_value=row.get("COLUMN_DEFAULT"),
        is_identity=bool(row.get("IS_IDENTITY")),
        is_primary_key=bool(row.get("IS_PRIMARY_KEY")),
        ordinal_position=row["ORDINAL_POSITION"]
    )


def _map_foreign_key(row: Dict[str, Any]) -> ForeignKeyInfo:
    return ForeignKeyInfo(
        constraint_name=row["CONSTRAINT_NAME"],
        column_name=row["COLUMN_NAME"],
        referenced_schema=row["REFERENCED_SCHEMA"],
        referenced_table=row["REFERENCED_TABLE"],
        referenced_column=row["REFERENCED_COLUMN"]
    )


def _map_index(row: Dict[str, Any]) -> IndexInfo:
    return IndexInfo(
        index_name=row["INDEX_NAME"],
        column_name=row["COLUMN_NAME"],
        is_unique=bool(row["IS_UNIQUE"]),
        is_primary_key=bool(row["IS_PRIMARY_KEY"]),
        index_type=row["INDEX_TYPE"]
    )


def _map_parameter(row: Dict[str, Any]) -> ParameterInfo:
    return ParameterInfo(
        parameter_name=row.get("PARAMETER_NAME") or "",
        data_type=row["DATA_TYPE"],
        max_length=row.get("CHARACTER_MAXIMUM_LENGTH"),
        is_output=row.get("PARAMETER_MODE") in ("OUT", "INOUT"),
        ordinal_position=row["ORDINAL_POSITION"]
    )


class SchemaIntrospector:
    """Builds schema descriptions from catalog queries.

    Args:
        gateway: Anything exposing ``execute_query(text, parameters)``,
            ``db_type`` and ``default_schema`` (normally the
            ``ConnectionGateway``)
        catalog: Catalog queries; defaults to the gateway's product
    """

    def __init__(self, gateway, catalog: Optional[CatalogQueries] = None):
        self.gateway = gateway
        self.catalog = catalog or get_catalog(gateway.db_type)

    async def _rows(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        result = await self.gateway.execute_query(query, parameters)
        return result.recordset

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def list_tables(self) -> List[str]:
        """Return ``schema.table`` names ordered by full name."""
        rows = await self._rows(self.catalog.list_tables)
        return [row["full_name"] for row in rows]

    async def get_table_schema(self, table_name: str, schema_name: Optional[str] = None) -> Optional[TableSchema]:
        """
        Describe one table.

        The column, primary key, foreign key and index queries run
        concurrently and all of them must finish before the record is built.

        Args:
            table_name: Table name (already sanitized by the caller)
            schema_name: Schema; the gateway default when omitted

        Returns:
            TableSchema, or None when the table does not exist

        Raises:
            QueryExecutionError: any of the four catalog queries failed
        """
        schema_name = schema_name or self.gateway.default_schema
        params = {"tableName": table_name, "schemaName": schema_name}

        try:
            column_rows, key_rows, fk_rows, index_rows = await asyncio.gather(
                self._rows(self.catalog.columns, params),
                self._rows(self.catalog.primary_keys, params),
                self._rows(self.catalog.foreign_keys, params),
                self._rows(self.catalog.indexes, params),
            )
        except Exception as e:
            logger.error(f"Error getting schema for table {schema_name}.{table_name}: {e}")
            raise

        if not column_rows:
            logger.info(f"Table {schema_name}.{table_name} not found")
            return None

        return TableSchema(
            table_name=table_name,
            schema_name=schema_name,
            columns=[_map_column(row) for row in column_rows],
            primary_keys=[row["COLUMN_NAME"] for row in key_rows],
            foreign_keys=[_map_foreign_key(row) for row in fk_rows],
            indexes=[_map_index(row) for row in index_rows]
        )

    async def table_exists(self, table_name: str, schema_name: Optional[str] = None) -> bool:
        schema_name = schema_name or self.gateway.default_schema
        rows = await self._rows(
            self.catalog.table_exists,
            {"tableName": table_name, "schemaName": schema_name}
        )
        return bool(rows) and bool(rows[0].get("TABLE_COUNT"))

    async def get_sample_rows(
        self,
        table_name: str,
        schema_name: Optional[str] = None,
        limit: int = 10
    ) -> Optional[List[Dict[str, Any]]]:
        """Return up to ``limit`` rows of a table or view, or None if it does not exist."""
        schema_name = schema_name or self.gateway.default_schema
        if not await self.table_exists(table_name, schema_name):
            return None

        table = quote_identifier(f"{schema_name}.{table_name}", self.catalog.db_type)
        return await self._rows(self.catalog.sample_rows.format(table=table), {"limit": limit})

    async def search_columns(self, pattern: str) -> List[Dict[str, Any]]:
        """Find columns whose name contains ``pattern`` (case-insensitive)."""
        rows = await self._rows(self.catalog.search_columns, {"pattern": f"%{pattern}%"})
        return [
            {
                "schema": row["TABLE_SCHEMA"],
                "tableName": row["TABLE_NAME"],
                "columnName": row["COLUMN_NAME"],
                "dataType": row["DATA_TYPE"]
            }
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Whole database
    # ------------------------------------------------------------------

    async def get_database_metadata(self) -> DatabaseMetadata:
        """
        Snapshot every table, view, procedure and function.

        The four object classes are fetched concurrently; within a class,
        items are described one at a time in discovery order. Any failure
        aborts the whole snapshot.
        """
        tables, views, procedures, functions = await asyncio.gather(
            self._get_all_table_schemas(),
            self.get_views(),
            self.get_procedures(),
            self.get_functions(),
        )

        return DatabaseMetadata(
            tables=tables,
            views=views,
            procedures=procedures,
            functions=functions
        )

    async def _get_all_table_schemas(self) -> List[TableSchema]:
        schemas = []
        for full_name in await self.list_tables():
            schema_name, _, table_name = full_name.partition(".")
            table_schema = await self.get_table_schema(table_name, schema_name)
            # Dropped between listing and describing
            if table_schema is not None:
                schemas.append(table_schema)
        return schemas

    async def get_views(self) -> List[ViewInfo]:
        views = []
        for row in await self._rows(self.catalog.views):
            column_rows = await self._rows(
                self.catalog.view_columns,
                {"viewName": row["TABLE_NAME"], "schemaName": row["TABLE_SCHEMA"]}
            )
            views.append(ViewInfo(
                view_name=row["TABLE_NAME"],
                schema_name=row["TABLE_SCHEMA"],
                definition=row.get("VIEW_DEFINITION"),
                columns=[_map_column(column) for column in column_rows]
            ))
        return views

    async def get_procedures(self) -> List[ProcedureInfo]:
        procedures = []
        for row in await self._rows(self.catalog.procedures):
            parameters = await self._routine_parameters(row)
            procedures.append(ProcedureInfo(
                procedure_name=row["ROUTINE_NAME"],
                schema_name=row["ROUTINE_SCHEMA"],
                parameters=parameters,
                definition=row.get("ROUTINE_DEFINITION")
            ))
        return procedures

    async def get_functions(self) -> List[FunctionInfo]:
        functions = []
        for row in await self._rows(self.catalog.functions):
            parameters = await self._routine_parameters(row)
            functions.append(FunctionInfo(
                function_name=row["ROUTINE_NAME"],
                schema_name=row["ROUTINE_SCHEMA"],
                parameters=parameters,
                return_type=row.get("RETURN_TYPE") or "void",
                definition=row.get("ROUTINE_DEFINITION")
            ))
        return functions

    async def _routine_parameters(self, row: Dict[str, Any]) -> List[ParameterInfo]:
        return await self.get_routine_parameters(
            row.get("SPECIFIC_NAME") or row["ROUTINE_NAME"],
            row["ROUTINE_SCHEMA"]
        )

    async def get_routine_parameters(self, routine_name: str, schema_name: Optional[str] = None) -> List[ParameterInfo]:
        """Declared parameters of a routine, in ordinal order.

        The function return value pseudo-parameter is skipped.
        """
        schema_name = schema_name or self.gateway.default_schema
        rows = await self._rows(
            self.catalog.routine_parameters,
            {"routineName": routine_name, "schemaName": schema_name}
        )
        return [_map_parameter(row) for row in rows if row.get("IS_RESULT") != "YES"]
