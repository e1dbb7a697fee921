"""Pooled async drivers behind one execute interface.

Each connector owns a pool for the configured database and turns
``@name`` parameters into the placeholder style of its driver. Results
come back as :class:`ResultSet` so callers never see driver rows.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aioodbc
import asyncpg

from core.config import DatabaseConfig
from database.binding import (
    NUMERIC,
    QMARK,
    bind_named_parameters,
    clean_identifier_part,
    normalize_parameters,
    quote_identifier,
)

logger = logging.getLogger(__name__)


@dataclass
class ResultSet:
    """Rows and counts produced by one statement batch."""

    recordsets: List[List[Dict[str, Any]]] = field(default_factory=list)
    rows_affected: List[int] = field(default_factory=list)
    output: Dict[str, Any] = field(default_factory=dict)

    @property
    def recordset(self) -> List[Dict[str, Any]]:
        """First row set, or an empty list for statements returning none."""
        return self.recordsets[0] if self.recordsets else []


class AsyncDatabaseConnector(ABC):
    """Pool lifecycle shared by the drivers; subclasses supply the SQL dialect."""

    db_type: str = ""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._pool = None

    @property
    def has_pool(self) -> bool:
        return self._pool is not None

    async def initialize_pool(self, min_size: int = 0, max_size: int = 10):
        try:
            self._pool = await self._create_pool(min_size, max_size)
        except Exception as e:
            logger.error(f"{self.db_type} pool could not be created: {e}")
            raise
        logger.info(f"✅ {self.db_type} pool ready ({min_size}..{max_size} connections)")

    @asynccontextmanager
    async def get_connection(self):
        """Borrow a pooled connection, creating the pool on first use."""
        if self._pool is None:
            await self.initialize_pool(self.config.pool_min, self.config.pool_max)
        async with self._pool.acquire() as conn:
            yield conn

    async def close(self):
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await self._close_pool(pool)
        logger.info(f"{self.db_type} pool closed")

    @abstractmethod
    async def _create_pool(self, min_size: int, max_size: int):
        pass

    @abstractmethod
    async def _close_pool(self, pool):
        pass

    @abstractmethod
    async def execute_query(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Execute SQL text with named parameters."""

    @abstractmethod
    async def execute_procedure(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Invoke a stored routine with named parameters."""


class AsyncMSSQLConnector(AsyncDatabaseConnector):
    """SQL Server through aioodbc."""

    db_type = "mssql"

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self.connection_string = config.get_connection_string()

    async def _create_pool(self, min_size: int, max_size: int):
        return await aioodbc.create_pool(
            dsn=self.connection_string,
            minsize=min_size,
            maxsize=max_size,
            autocommit=True,
            timeout=self.config.timeout
        )

    async def _close_pool(self, pool):
        pool.close()
        await pool.wait_closed()

    async def execute_query(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Execute a batch and collect every result set it produces."""
        sql, args = bind_named_parameters(query, parameters, QMARK)
        return await self._run(sql, args)

    async def execute_procedure(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Run ``EXEC [schema].[proc] @a = ?, ...``.

        ODBC has no portable way to read OUTPUT parameters back, so
        ``output`` stays empty.
        """
        params = normalize_parameters(parameters)
        assignments = ", ".join(f"@{clean_identifier_part(key)} = ?" for key in params)
        sql = f"EXEC {quote_identifier(name, self.db_type)}"
        if assignments:
            sql += f" {assignments}"
        return await self._run(sql, list(params.values()))

    async def _run(self, sql: str, args: List[Any]) -> ResultSet:
        result = ResultSet()
        async with self.get_connection() as conn:
            async with conn.cursor() as cursor:
                await cursor.execute(sql, args)
                while True:
                    if cursor.description:
                        columns = [desc[0] for desc in cursor.description]
                        rows = await cursor.fetchall()
                        result.recordsets.append([dict(zip(columns, row)) for row in rows])
                        result.rows_affected.append(len(rows))
                    elif cursor.rowcount is not None and cursor.rowcount >= 0:
                        result.rows_affected.append(cursor.rowcount)
                    if not await cursor.nextset():
                        break
        return result


class AsyncPostgreSQLConnector(AsyncDatabaseConnector):
    """PostgreSQL through asyncpg."""

    db_type = "postgresql"

    async def _create_pool(self, min_size: int, max_size: int):
        return await asyncpg.create_pool(
            host=self.config.server,
            port=self.config.port,
            database=self.config.database,
            user=self.config.username,
            password=self.config.password,
            ssl=self.config.sslmode,
            min_size=min_size,
            max_size=max_size,
            timeout=self.config.timeout,
            command_timeout=self.config.command_timeout
        )

    async def _close_pool(self, pool):
        await pool.close()

    async def execute_query(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Execute a single statement; asyncpg has no multi-result batches."""
        sql, args = bind_named_parameters(query, parameters, NUMERIC)
        return await self._run(sql, args)

    async def execute_procedure(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Run ``CALL "schema"."proc"(a => $1, ...)``.

        INOUT/OUT parameters come back as a single row, which is also
        exposed as ``output``.
        """
        params = normalize_parameters(parameters)
        arguments = ", ".join(
            f"{clean_identifier_part(key)} => ${position}"
            for position, key in enumerate(params, start=1)
        )
        sql = f"CALL {quote_identifier(name, self.db_type)}({arguments})"
        result = await self._run(sql, list(params.values()))
        if result.recordset:
            result.output = dict(result.recordset[0])
        return result

    async def _run(self, sql: str, args: List[Any]) -> ResultSet:
        async with self.get_connection() as conn:
            statement = await conn.prepare(sql)
            records = await statement.fetch(*args)
            rows = [dict(record) for record in records]
            status = statement.get_statusmsg() or ""
            returns_rows = bool(statement.get_attributes())

        # Status is e.g. "SELECT 3", "INSERT 0 5", "CALL"
        last = status.split()[-1] if status else ""
        affected = int(last) if last.isdigit() else len(rows)
        recordsets = [rows] if returns_rows else []
        return ResultSet(recordsets=recordsets, rows_affected=[affected])


CONNECTORS = {
    AsyncMSSQLConnector.db_type: AsyncMSSQLConnector,
    AsyncPostgreSQLConnector.db_type: AsyncPostgreSQLConnector,
}


def create_async_database_connector(config: DatabaseConfig) -> AsyncDatabaseConnector:
    """Return the connector class registered for ``config.db_type``.

    Raises:
        ValueError: no connector is registered for that type
    """
    connector_class = CONNECTORS.get(config.db_type.lower())
    if connector_class is None:
        raise ValueError(f"Unsupported database type: {config.db_type}")
    return connector_class(config)
