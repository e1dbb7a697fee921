"""Schema introspection modules."""

from .catalog import CatalogQueries, MSSQL_CATALOG, POSTGRESQL_CATALOG, get_catalog
from .introspector import SchemaIntrospector
from .models import (
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

__all__ = [
    "CatalogQueries",
    "MSSQL_CATALOG",
    "POSTGRESQL_CATALOG",
    "get_catalog",
    "SchemaIntrospector",
    "ColumnInfo",
    "DatabaseMetadata",
    "ForeignKeyInfo",
    "FunctionInfo",
    "IndexInfo",
    "ParameterInfo",
    "ProcedureInfo",
    "TableSchema",
    "ViewInfo",
]
