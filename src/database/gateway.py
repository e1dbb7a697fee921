"""Connection gateway: one lazily created pool per process."""

import asyncio
import logging
from typing import Any, Dict, Optional

from core.config import DatabaseConfig
from core.exceptions import DatabaseConnectionError, QueryExecutionError
from database.async_connectors import AsyncDatabaseConnector, ResultSet, create_async_database_connector

logger = logging.getLogger(__name__)


class ConnectionGateway:
    """
    Uniform ``execute_query`` / ``execute_procedure`` contract over a pool.

    - The pool is created on first use; concurrent first callers share a
      single in-flight connect instead of racing to build two pools.
    - Parameters are always bound by name.
    - Driver failures are re-raised as ``QueryExecutionError`` with the
      driver message; nothing is swallowed.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.db_connector: Optional[AsyncDatabaseConnector] = None
        self._connect_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self.db_connector is not None and self.db_connector.has_pool

    @property
    def db_type(self) -> str:
        return self.config.db_type

    @property
    def default_schema(self) -> str:
        return self.config.default_schema

    async def connect(self):
        """
        Establish the connection pool (no-op when already connected).

        Returns:
            The connector now serving this gateway

        Raises:
            DatabaseConnectionError: network or authentication failure
        """
        if self.is_connected:
            return self.db_connector

        async with self._connect_lock:
            if self.is_connected:
                return self.db_connector

            connector = create_async_database_connector(self.config)
            try:
                await connector.initialize_pool(self.config.pool_min, self.config.pool_max)
            except Exception as e:
                logger.error(f"Failed to connect to database: {e}")
                raise DatabaseConnectionError(
                    f"Failed to connect to database: {e}",
                    details=self.config.describe()
                ) from e

            self.db_connector = connector
            logger.info(f"Connected to {self.config.db_type} database {self.config.database}")
            return connector

    async def execute_query(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """
        Execute SQL text, auto-connecting first if needed.

        Args:
            query: SQL text using ``@name`` placeholders
            parameters: Values bound by name

        Returns:
            ResultSet with every row set and affected-row count
        """
        connector = await self.connect()
        try:
            return await connector.execute_query(query, parameters)
        except Exception as e:
            logger.error(f"Query execution failed: {e}")
            raise QueryExecutionError(str(e), details={"query": query[:200]}) from e

    async def execute_procedure(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Invoke a stored routine by name with named parameters."""
        connector = await self.connect()
        try:
            return await connector.execute_procedure(name, parameters)
        except Exception as e:
            logger.error(f"Stored procedure execution failed: {e}")
            raise QueryExecutionError(str(e), details={"procedure": name}) from e

    async def disconnect(self):
        """Close the pool and forget it. Safe to call when disconnected."""
        async with self._connect_lock:
            if self.db_connector is None:
                return
            connector, self.db_connector = self.db_connector, None
            await connector.close()
            logger.info(f"Disconnected from {self.config.db_type} database {self.config.database}")
