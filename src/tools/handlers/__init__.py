"""Tool handlers package."""

from tools.handlers.query_handler import QueryHandler
from tools.handlers.procedure_handler import ProcedureHandler
from tools.handlers.connection_handler import ConnectionHandler
from tools.handlers.schema_handler import SchemaHandler

__all__ = [
    'QueryHandler',
    'ProcedureHandler',
    'ConnectionHandler',
    'SchemaHandler',
]
