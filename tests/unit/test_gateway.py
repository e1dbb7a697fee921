"""
ConnectionGateway 單元測試

測試延遲連線、單一連線建立、錯誤包裝與中斷連線。
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.config import DatabaseConfig
from core.exceptions import DatabaseConnectionError, QueryExecutionError
from database.async_connectors import ResultSet
from database.gateway import ConnectionGateway


class TestConnectionGateway:
    """連線閘道測試"""

    @pytest.fixture
    def db_config(self):
        """測試用資料庫配置"""
        return DatabaseConfig(
            db_type="mssql",
            server="localhost",
            database="testdb",
            username="sa",
            password="secret",
            pool_min=1,
            pool_max=5
        )

    @pytest.fixture
    def mock_connector(self):
        """Mock 異步連接器；initialize_pool 後 has_pool 變為 True"""
        connector = MagicMock()
        connector.has_pool = False

        async def initialize_pool(min_size, max_size):
            await asyncio.sleep(0)
            connector.has_pool = True

        connector.initialize_pool = AsyncMock(side_effect=initialize_pool)
        connector.execute_query = AsyncMock(return_value=ResultSet(
            recordsets=[[{"id": 1, "name": "test"}]],
            rows_affected=[1]
        ))
        connector.execute_procedure = AsyncMock(return_value=ResultSet())
        connector.close = AsyncMock()
        return connector

    def test_initial_state(self, db_config):
        """✅ 建立後尚未連線"""
        gateway = ConnectionGateway(db_config)
        assert gateway.is_connected is False
        assert gateway.db_connector is None
        assert gateway.db_type == "mssql"
        assert gateway.default_schema == "dbo"

    @pytest.mark.asyncio
    async def test_connect_creates_pool(self, db_config, mock_connector):
        """✅ connect 建立連接池並使用配置的大小"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            await gateway.connect()

        assert gateway.is_connected is True
        mock_connector.initialize_pool.assert_awaited_once_with(1, 5)

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, db_config, mock_connector):
        """✅ 已連線時 connect 不再建立連接池"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector) as factory:
            gateway = ConnectionGateway(db_config)
            await gateway.connect()
            await gateway.connect()

        assert factory.call_count == 1
        assert mock_connector.initialize_pool.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_connect_is_single_flight(self, db_config, mock_connector):
        """✅ 並發的第一次連線只建立一個連接池"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector) as factory:
            gateway = ConnectionGateway(db_config)
            await asyncio.gather(*(gateway.connect() for _ in range(5)))

        assert factory.call_count == 1
        assert mock_connector.initialize_pool.await_count == 1

    @pytest.mark.asyncio
    async def test_execute_query_auto_connects(self, db_config, mock_connector):
        """✅ 尚未連線時 execute_query 自動連線"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            result = await gateway.execute_query("SELECT * FROM t WHERE id = @id", {"id": 1})

        assert gateway.is_connected is True
        assert result.recordset == [{"id": 1, "name": "test"}]
        mock_connector.execute_query.assert_awaited_once_with("SELECT * FROM t WHERE id = @id", {"id": 1})

    @pytest.mark.asyncio
    async def test_connect_failure_raises_connection_error(self, db_config, mock_connector):
        """❌ 連線失敗包裝為 DatabaseConnectionError，且不含密碼"""
        mock_connector.initialize_pool = AsyncMock(side_effect=OSError("Login failed for user 'sa'"))

        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            with pytest.raises(DatabaseConnectionError) as exc_info:
                await gateway.connect()

        assert "Login failed for user 'sa'" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, OSError)
        assert "secret" not in str(exc_info.value.details)
        assert gateway.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_can_retry_after_failure(self, db_config, mock_connector):
        """✅ 失敗後可重新連線"""
        failing = MagicMock()
        failing.initialize_pool = AsyncMock(side_effect=OSError("network down"))

        with patch("database.gateway.create_async_database_connector", side_effect=[failing, mock_connector]):
            gateway = ConnectionGateway(db_config)
            with pytest.raises(DatabaseConnectionError):
                await gateway.connect()
            await gateway.connect()

        assert gateway.is_connected is True

    @pytest.mark.asyncio
    async def test_driver_error_wrapped(self, db_config, mock_connector):
        """❌ 驅動程式錯誤包裝為 QueryExecutionError，保留訊息"""
        mock_connector.execute_query = AsyncMock(side_effect=RuntimeError("Invalid object name 'nope'"))

        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            with pytest.raises(QueryExecutionError) as exc_info:
                await gateway.execute_query("SELECT * FROM nope")

        assert exc_info.value.message == "Invalid object name 'nope'"
        assert exc_info.value.details == {"query": "SELECT * FROM nope"}

    @pytest.mark.asyncio
    async def test_execute_procedure(self, db_config, mock_connector):
        """✅ execute_procedure 以具名參數呼叫連接器"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            await gateway.execute_procedure("dbo.GetUser", {"id": 7})

        mock_connector.execute_procedure.assert_awaited_once_with("dbo.GetUser", {"id": 7})

    @pytest.mark.asyncio
    async def test_procedure_error_wrapped(self, db_config, mock_connector):
        """❌ 預存程序錯誤包裝為 QueryExecutionError"""
        mock_connector.execute_procedure = AsyncMock(side_effect=RuntimeError("Could not find stored procedure"))

        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            with pytest.raises(QueryExecutionError) as exc_info:
                await gateway.execute_procedure("dbo.Missing")

        assert exc_info.value.details == {"procedure": "dbo.Missing"}

    @pytest.mark.asyncio
    async def test_disconnect(self, db_config, mock_connector):
        """✅ disconnect 關閉連接池，重複呼叫無副作用"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            await gateway.connect()
            await gateway.disconnect()
            await gateway.disconnect()

        mock_connector.close.assert_awaited_once()
        assert gateway.db_connector is None
        assert gateway.is_connected is False

    @pytest.mark.asyncio
    async def test_query_uses_connector_from_connect(self, db_config, mock_connector):
        """✅ 查詢使用 connect 回傳的連接器，即使期間已被 disconnect"""
        with patch("database.gateway.create_async_database_connector", return_value=mock_connector):
            gateway = ConnectionGateway(db_config)
            assert await gateway.connect() is mock_connector
            assert await gateway.connect() is mock_connector

        async def connect_then_closed():
            gateway.db_connector = None
            return mock_connector

        with patch.object(gateway, "connect", AsyncMock(side_effect=connect_then_closed)):
            result = await gateway.execute_query("SELECT 1")
            await gateway.execute_procedure("dbo.Ping")

        assert result.recordset == [{"id": 1, "name": "test"}]
        mock_connector.execute_query.assert_awaited_once_with("SELECT 1", None)
        mock_connector.execute_procedure.assert_awaited_once_with("dbo.Ping", None)
