"""MCP tool definitions for the query gateway."""

from typing import List
from mcp.types import Tool


# Tool names (matched verbatim by the handlers)
TOOL_EXECUTE_QUERY = "execute_query"
TOOL_GET_TABLE_SCHEMA = "get_table_schema"
TOOL_LIST_TABLES = "list_tables"
TOOL_GET_DATABASE_METADATA = "get_database_metadata"
TOOL_EXECUTE_STORED_PROCEDURE = "execute_stored_procedure"
TOOL_TEST_CONNECTION = "test_connection"
TOOL_GET_TABLE_DATA = "get_table_data"
TOOL_SEARCH_COLUMNS = "search_columns"

_NO_ARGUMENTS = {
    "type": "object",
    "properties": {},
    "required": []
}


def get_all_tools() -> List[Tool]:
    """Return every tool definition exposed by the server."""
    return [
        Tool(
            name=TOOL_EXECUTE_QUERY,
            description=(
                "Execute a SQL query against the database (read-only by default). "
                "Bind values with @name placeholders and the 'parameters' object."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The SQL query to execute"
                    },
                    "parameters": {
                        "type": "object",
                        "description": "Parameters to bind to the query, by name",
                        "additionalProperties": True
                    },
                    "allowWriteOperations": {
                        "type": "boolean",
                        "description": "Allow write operations (INSERT, UPDATE, DELETE)",
                        "default": False
                    }
                },
                "required": ["query"]
            }
        ),
        Tool(
            name=TOOL_GET_TABLE_SCHEMA,
            description="Get the schema information for a specific table",
            inputSchema={
                "type": "object",
                "properties": {
                    "tableName": {
                        "type": "string",
                        "description": "Name of the table"
                    },
                    "schemaName": {
                        "type": "string",
                        "description": "Schema name (defaults to dbo, or public on PostgreSQL)"
                    }
                },
                "required": ["tableName"]
            }
        ),
        Tool(
            name=TOOL_LIST_TABLES,
            description="List all tables in the database",
            inputSchema=_NO_ARGUMENTS
        ),
        Tool(
            name=TOOL_GET_DATABASE_METADATA,
            description=(
                "Get comprehensive metadata about the database including tables, "
                "views, procedures, and functions"
            ),
            inputSchema=_NO_ARGUMENTS
        ),
        Tool(
            name=TOOL_EXECUTE_STORED_PROCEDURE,
            description="Execute a stored procedure",
            inputSchema={
                "type": "object",
                "properties": {
                    "procedureName": {
                        "type": "string",
                        "description": "Name of the stored procedure (optionally schema-qualified)"
                    },
                    "parameters": {
                        "type": "object",
                        "description": "Parameters to pass to the stored procedure, by name",
                        "additionalProperties": True
                    }
                },
                "required": ["procedureName"]
            }
        ),
        Tool(
            name=TOOL_TEST_CONNECTION,
            description="Test the database connection",
            inputSchema=_NO_ARGUMENTS
        ),
        Tool(
            name=TOOL_GET_TABLE_DATA,
            description="Return sample rows from a table",
            inputSchema={
                "type": "object",
                "properties": {
                    "tableName": {
                        "type": "string",
                        "description": "Name of the table"
                    },
                    "schemaName": {
                        "type": "string",
                        "description": "Schema name (defaults to dbo, or public on PostgreSQL)"
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Number of rows to return (1-100)",
                        "minimum": 1,
                        "maximum": 100,
                        "default": 10
                    }
                },
                "required": ["tableName"]
            }
        ),
        Tool(
            name=TOOL_SEARCH_COLUMNS,
            description="Find columns whose names match a pattern (case-insensitive)",
            inputSchema={
                "type": "object",
                "properties": {
                    "pattern": {
                        "type": "string",
                        "description": "Substring to look for in column names"
                    }
                },
                "required": ["pattern"]
            }
        ),
    ]
