"""
pytest 配置文件

提供測試環境設定、fixtures 和全局配置
"""

import sys
from pathlib import Path

import pytest

# 添加 src 目錄到 Python 路徑
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from database.async_connectors import ResultSet  # noqa: E402


class FakeGateway:
    """
    以查詢文字為鍵的假 ConnectionGateway

    responses: {SQL 文字: 列清單 或 Exception}；未登記的查詢回傳空結果。
    所有呼叫都記錄在 calls 中，方便檢查呼叫次數。
    """

    def __init__(self, responses=None, db_type="mssql", default_schema="dbo"):
        self.responses = dict(responses or {})
        self.db_type = db_type
        self.default_schema = default_schema
        self.calls = []
        self.procedure_calls = []
        self.connect_calls = 0
        self.procedure_result = ResultSet()
        self.connect_error = None

    async def connect(self):
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error

    async def execute_query(self, query, parameters=None):
        self.calls.append((query, dict(parameters or {})))
        response = self.responses.get(query, [])
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(parameters or {})
        return ResultSet(recordsets=[list(response)], rows_affected=[len(response)])

    async def execute_procedure(self, name, parameters=None):
        self.procedure_calls.append((name, dict(parameters or {})))
        return self.procedure_result


@pytest.fixture
def fake_gateway():
    """假 gateway fixture（SQL Server）"""
    return FakeGateway()


@pytest.fixture
def sample_query():
    """範例查詢 fixture"""
    return "SELECT TOP 10 name FROM sys.tables"


@pytest.fixture
def sample_malicious_queries():
    """惡意查詢範例 fixture（用於測試 SQL 注入防護）"""
    return [
        "SELECT * FROM users; DROP TABLE users;--",
        "SELECT * FROM users WHERE id = 1 OR 1=1--",
        "SELECT * FROM users/* comment */WHERE id=1",
        "SELECT * FROM users UNION SELECT name, password FROM logins",
        "DELETE FROM users WHERE id = 1",
        "DROP TABLE users",
        "UPDATE users SET password = 'hacked'",
        "EXEC sp_executesql N'SELECT * FROM users'",
    ]


@pytest.fixture
def sample_table_name():
    """範例表格名稱 fixture"""
    return "Customers"
