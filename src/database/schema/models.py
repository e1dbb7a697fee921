"""Immutable schema description records.

Python attributes are snake_case; serialized names are camelCase
(``columnName``, ``isNullable``, ...) via ``model_dump(by_alias=True)``.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class SchemaRecord(BaseModel):
    """Base for all schema records."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ColumnInfo(SchemaRecord):
    column_name: str
    data_type: str
    is_nullable: bool
    default_value: Optional[str] = None
    max_length: Optional[int] = None
    is_identity: bool = False
    is_primary_key: bool = False
    ordinal_position: int = Field(ge=1)


class ForeignKeyInfo(SchemaRecord):
    constraint_name: str
    column_name: str
    referenced_schema: str
    referenced_table: str
    referenced_column: str


class IndexInfo(SchemaRecord):
    index_name: str
    column_name: str
    is_unique: bool
    is_primary_key: bool
    index_type: str


class TableSchema(SchemaRecord):
    """Columns, keys and indexes of one table.

    Columns are kept in ordinal order and every primary-key column must be
    one of the columns.
    """

    table_name: str
    schema_name: str = Field(alias="schema")
    columns: Tuple[ColumnInfo, ...] = ()
    primary_keys: Tuple[str, ...] = ()
    foreign_keys: Tuple[ForeignKeyInfo, ...] = ()
    indexes: Tuple[IndexInfo, ...] = ()

    @field_validator("columns")
    @classmethod
    def _order_columns(cls, columns: Tuple[ColumnInfo, ...]) -> Tuple[ColumnInfo, ...]:
        return tuple(sorted(columns, key=lambda column: column.ordinal_position))

    @model_validator(mode="after")
    def _check_primary_keys(self) -> "TableSchema":
        names = {column.column_name for column in self.columns}
        missing = [key for key in self.primary_keys if key not in names]
        if missing:
            raise ValueError(f"Primary key columns not found in table {self.table_name}: {', '.join(missing)}")
        return self

    @property
    def full_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


class ParameterInfo(SchemaRecord):
    parameter_name: str
    data_type: str
    max_length: Optional[int] = None
    is_output: bool = False
    ordinal_position: int


class ViewInfo(SchemaRecord):
    view_name: str
    schema_name: str = Field(alias="schema")
    definition: Optional[str] = None
    columns: Tuple[ColumnInfo, ...] = ()


class ProcedureInfo(SchemaRecord):
    procedure_name: str
    schema_name: str = Field(alias="schema")
    parameters: Tuple[ParameterInfo, ...] = ()
    definition: Optional[str] = None


class FunctionInfo(SchemaRecord):
    function_name: str
    schema_name: str = Field(alias="schema")
    parameters: Tuple[ParameterInfo, ...] = ()
    return_type: str = "void"
    definition: Optional[str] = None


class DatabaseMetadata(SchemaRecord):
    """Snapshot of every table, view and routine. Built fresh per request."""

    tables: Tuple[TableSchema, ...] = ()
    views: Tuple[ViewInfo, ...] = ()
    procedures: Tuple[ProcedureInfo, ...] = ()
    functions: Tuple[FunctionInfo, ...] = ()

    def counts(self) -> dict:
        return {
            "tables": len(self.tables),
            "views": len(self.views),
            "procedures": len(self.procedures),
            "functions": len(self.functions)
        }
