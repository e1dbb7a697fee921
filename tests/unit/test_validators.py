"""
SQL 驗證器單元測試

測試 SQL 安全驗證、識別符清理和參數型別檢查，確保能有效防範 SQL 注入。
"""

import math
from datetime import date, datetime

import pytest

from tools.validators import InputValidator, SQLValidator, ValidationResult


class TestSQLValidator:
    """SQL 查詢驗證器測試"""

    def test_valid_simple_select(self):
        """✅ 合法的簡單 SELECT 查詢"""
        result = SQLValidator.validate_query("SELECT * FROM users")
        assert result.is_valid is True
        assert result.errors == []

    def test_result_is_named_tuple(self):
        """✅ 回傳 ValidationResult，可解構"""
        is_valid, errors = SQLValidator.validate_query("SELECT 1")
        assert is_valid is True
        assert errors == []
        assert isinstance(SQLValidator.validate_query("SELECT 1"), ValidationResult)

    def test_valid_select_with_where(self):
        """✅ 合法的 SELECT 查詢（帶 WHERE）"""
        result = SQLValidator.validate_query("SELECT id, name FROM users WHERE age > 18")
        assert result.is_valid is True

    def test_valid_select_with_join(self):
        """✅ 合法的 SELECT 查詢（帶 JOIN）"""
        query = """
            SELECT u.id, u.name, o.order_id
            FROM users u
            INNER JOIN orders o ON u.id = o.user_id
        """
        assert SQLValidator.validate_query(query).is_valid is True

    def test_valid_with_cte(self):
        """✅ 合法的 WITH (CTE) 查詢"""
        query = """
            WITH sales_summary AS (
                SELECT product_id, SUM(amount) as total
                FROM sales
                GROUP BY product_id
            )
            SELECT * FROM sales_summary WHERE total > 1000
        """
        assert SQLValidator.validate_query(query).is_valid is True

    def test_leading_whitespace_and_lowercase(self):
        """✅ 前導空白與小寫關鍵字"""
        assert SQLValidator.is_read_only_query("   select name from users") is True

    def test_first_token_must_be_whole_keyword(self):
        """❌ 開頭關鍵字需完整比對（SELECTX、WITHIN 不算）"""
        assert SQLValidator.is_read_only_query("SELECTX FROM t") is False
        assert SQLValidator.is_read_only_query("WITHIN GROUP") is False
        assert SQLValidator.is_read_only_query("WITHOUT_TABLE") is False
        assert SQLValidator.validate_query("SELECTX FROM t").errors == ["Only read-only queries are allowed"]

    def test_keyword_followed_by_symbol(self):
        """✅ 關鍵字後直接接符號"""
        assert SQLValidator.is_read_only_query("SELECT*FROM t") is True
        assert SQLValidator.is_read_only_query("WITH\ncte AS (SELECT 1 AS n) SELECT n FROM cte") is True

    def test_reject_drop_table(self):
        """❌ 拒絕 DROP TABLE"""
        result = SQLValidator.validate_query("DROP TABLE users")
        assert result.is_valid is False
        assert "Only read-only queries are allowed" in result.errors

    @pytest.mark.parametrize("query", [
        "DELETE FROM users WHERE id = 1",
        "INSERT INTO users (name) VALUES ('hacker')",
        "UPDATE users SET password = 'hacked' WHERE id = 1",
        "CREATE TABLE malicious (id INT)",
        "ALTER TABLE users ADD hacked VARCHAR(100)",
        "TRUNCATE TABLE users",
        "EXECUTE sp_help",
        "SHUTDOWN WITH NOWAIT",
        "KILL 52",
    ])
    def test_reject_write_statements(self, query):
        """❌ 拒絕寫入與管理語句"""
        result = SQLValidator.validate_query(query)
        assert result.is_valid is False
        assert "Only read-only queries are allowed" in result.errors

    def test_reject_statement_not_starting_with_select(self):
        """❌ 只允許 SELECT 或 WITH 開頭"""
        result = SQLValidator.validate_query("PRINT 'hello'")
        assert result.is_valid is False
        assert result.errors == ["Only read-only queries are allowed"]

    def test_reject_stacked_drop(self):
        """❌ 拒絕分號後接 DROP 的多語句注入"""
        result = SQLValidator.validate_query("SELECT * FROM t; DROP TABLE t")
        assert result.is_valid is False
        assert result.errors == [
            "Query contains potentially dangerous patterns",
            "Only read-only queries are allowed",
        ]

    def test_keyword_match_is_substring(self):
        """❌ 關鍵字以子字串比對（created_at 含 CREATE）"""
        assert SQLValidator.is_read_only_query("SELECT created_at FROM orders") is False
        assert SQLValidator.is_read_only_query("SELECT * FROM dropoff_locations") is False

    def test_reject_sql_comments_double_dash(self):
        """❌ 拒絕 SQL 註釋（--）"""
        result = SQLValidator.validate_query("SELECT * FROM users WHERE id = 1 --comment")
        assert result.is_valid is False
        assert result.errors == ["Query contains potentially dangerous patterns"]

    def test_reject_sql_comments_block(self):
        """❌ 拒絕 SQL 註釋（/* */）"""
        assert SQLValidator.has_injection_patterns("SELECT * FROM users /* comment */ WHERE id = 1") is True
        assert SQLValidator.has_injection_patterns("SELECT 1 */") is True

    def test_reject_union_select(self):
        """❌ 拒絕 UNION SELECT"""
        assert SQLValidator.has_injection_patterns("SELECT a FROM t UNION   SELECT b FROM u") is True

    def test_reject_exec_call(self):
        """❌ 拒絕 EXEC( 動態 SQL"""
        assert SQLValidator.has_injection_patterns("SELECT 1 WHERE 1 = EXEC ('x')") is True
        assert SQLValidator.has_injection_patterns("select 1 where execute('x')") is True

    def test_reject_extended_procedure_prefixes(self):
        """❌ 拒絕 xp_ / sp_ 前綴"""
        assert SQLValidator.has_injection_patterns("SELECT * FROM XP_CMDSHELL") is True
        assert SQLValidator.has_injection_patterns("SELECT * FROM sp_who") is True

    def test_plain_query_has_no_injection_patterns(self):
        """✅ 一般查詢不觸發注入規則"""
        assert SQLValidator.has_injection_patterns("SELECT id FROM users WHERE id = @id") is False

    def test_reject_query_too_long(self):
        """❌ 拒絕超長查詢（預設 10000 字元）"""
        long_query = "SELECT " + "x" * 10000
        result = SQLValidator.validate_query(long_query)
        assert result.is_valid is False
        assert result.errors == ["Query exceeds maximum allowed length"]

    def test_query_at_length_limit(self):
        """✅ 剛好等於長度上限"""
        query = "SELECT 1" + " " * (10000 - len("SELECT 1"))
        assert len(query) == 10000
        assert SQLValidator.is_valid_length(query) is True

    def test_custom_max_length(self):
        """❌ 自定義長度上限"""
        assert SQLValidator.is_valid_length("SELECT 1", max_length=5) is False
        result = SQLValidator.validate_query("SELECT 1", max_length=5)
        assert result.errors == ["Query exceeds maximum allowed length"]

    def test_allow_write_skips_read_only_check(self):
        """✅ allow_write=True 時允許寫入語句"""
        assert SQLValidator.validate_query("DELETE FROM users WHERE id = 1", allow_write=True).is_valid is True
        assert SQLValidator.validate_query("DROP TABLE users", allow_write=True).is_valid is True

    def test_allow_write_still_checks_injection(self):
        """❌ allow_write=True 仍檢查注入模式"""
        result = SQLValidator.validate_query("SELECT 1; DROP TABLE users", allow_write=True)
        assert result.is_valid is False
        assert result.errors == ["Query contains potentially dangerous patterns"]

    def test_errors_accumulate_in_order(self):
        """❌ 每個失敗的檢查各產生一則錯誤，依序排列"""
        query = "DELETE FROM t; DROP TABLE t --" + "x" * 10000
        result = SQLValidator.validate_query(query)
        assert result.errors == [
            "Query exceeds maximum allowed length",
            "Query contains potentially dangerous patterns",
            "Only read-only queries are allowed",
        ]

    def test_case_insensitive_keyword_detection(self):
        """❌ 大小寫不敏感的關鍵字檢測"""
        for query in ["DeLeTe FrOm users", "dRoP tAbLe users", "ExEc sp_help"]:
            assert SQLValidator.validate_query(query).is_valid is False


class TestProcedureName:
    """預存程序名稱驗證測試"""

    @pytest.mark.parametrize("name", ["GetUsers", "dbo.GetUsers", "sales.usp_Report_2024"])
    def test_valid_procedure_names(self, name):
        """✅ 合法的程序名稱"""
        assert SQLValidator.is_valid_procedure_name(name) is True

    @pytest.mark.parametrize("name", [
        "", "1proc", "_proc", "a.b.c", "proc;DROP", "dbo.[proc]", "proc name", "dbo.",
    ])
    def test_invalid_procedure_names(self, name):
        """❌ 不合法的程序名稱"""
        assert SQLValidator.is_valid_procedure_name(name) is False


class TestInputValidator:
    """輸入驗證器測試"""

    def test_sanitize_strips_injection_characters(self):
        """✅ 清除引號、分號、空白和註釋符號"""
        assert InputValidator.sanitize_identifier("a'b; DROP--") == "abDROP"

    def test_sanitize_keeps_schema_qualified_name(self):
        """✅ 保留 schema.table"""
        assert InputValidator.sanitize_identifier("dbo.Order_Items2") == "dbo.Order_Items2"

    def test_sanitize_strips_brackets(self):
        """✅ 移除 SQL Server 方括號"""
        assert InputValidator.sanitize_identifier("[dbo].[users]") == "dbo.users"

    def test_sanitize_empty_and_none(self):
        """✅ 空值回傳空字串"""
        assert InputValidator.sanitize_identifier("") == ""
        assert InputValidator.sanitize_identifier(None) == ""
        assert InputValidator.sanitize_identifier("';--") == ""

    def test_sanitize_truncates_to_128(self):
        """✅ 截斷至 128 字元"""
        assert len(InputValidator.sanitize_identifier("a" * 300)) == 128

    def test_sanitize_output_alphabet(self):
        """✅ 輸出僅包含 [A-Za-z0-9_.]"""
        sanitized = InputValidator.sanitize_identifier("x$y%z../../etc\\passwd 表")
        assert sanitized == "xyz....etcpasswd"

    @pytest.mark.parametrize("name,expected", [
        ("id", True),
        ("@id", True),
        ("_private", True),
        ("user_id2", True),
        ("1id", False),
        ("a-b", False),
        ("@@id", False),
        ("", False),
        (123, False),
    ])
    def test_is_identifier(self, name, expected):
        """✅ 參數名稱必須是識別符"""
        assert InputValidator.is_identifier(name) is expected

    @pytest.mark.parametrize("value", [None, 1, 1.5, "x", True, False])
    def test_bindable_values(self, value):
        """✅ 純量可直接綁定"""
        assert InputValidator.is_bindable_value(value) is True

    @pytest.mark.parametrize("value", [[1], {"a": 1}, float("nan"), float("inf"), object()])
    def test_non_bindable_values(self, value):
        """❌ 非純量或非有限數值不可綁定"""
        assert InputValidator.is_bindable_value(value) is False

    def test_normalize_type(self):
        """✅ 型別正規化：小寫、去除長度"""
        assert InputValidator.normalize_type("NVARCHAR(50)") == "nvarchar"
        assert InputValidator.normalize_type("  Double Precision ") == "double precision"
        assert InputValidator.normalize_type("decimal(10, 2)") == "decimal"
        assert InputValidator.normalize_type(None) == ""

    def test_clamp_limit(self):
        """✅ 取樣筆數限制在 [1, max]"""
        assert InputValidator.clamp_limit(0, 100) == 1
        assert InputValidator.clamp_limit(-5, 100) == 1
        assert InputValidator.clamp_limit(25, 100) == 25
        assert InputValidator.clamp_limit(500, 100) == 100


class TestValidateParameter:
    """參數型別檢查測試"""

    @pytest.mark.parametrize("data_type", ["int", "bigint", "varchar", "datetime", "bit", "geography"])
    def test_null_always_passes(self, data_type):
        """✅ NULL 一律通過"""
        assert InputValidator.validate_parameter(None, data_type) is True

    def test_integer_family(self):
        """✅ 整數型別"""
        assert InputValidator.validate_parameter(3, "int") is True
        assert InputValidator.validate_parameter("42", "bigint") is True
        assert InputValidator.validate_parameter(7.0, "smallint") is True
        assert InputValidator.validate_parameter(3.14, "int") is False
        assert InputValidator.validate_parameter("abc", "int") is False
        assert InputValidator.validate_parameter("1e400", "int4") is False

    def test_decimal_family(self):
        """✅ 小數型別"""
        assert InputValidator.validate_parameter(3.14, "decimal(10,2)") is True
        assert InputValidator.validate_parameter("12.5", "numeric") is True
        assert InputValidator.validate_parameter(10, "money") is True
        assert InputValidator.validate_parameter("abc", "float") is False
        assert InputValidator.validate_parameter(math.inf, "float") is False

    def test_string_family(self):
        """✅ 字串型別"""
        assert InputValidator.validate_parameter("hi", "NVARCHAR(50)") is True
        assert InputValidator.validate_parameter("", "text") is True
        assert InputValidator.validate_parameter(5, "varchar") is False

    def test_datetime_family(self):
        """✅ 日期時間型別"""
        assert InputValidator.validate_parameter("2024-01-15", "date") is True
        assert InputValidator.validate_parameter("2024-01-15T10:30:00", "datetime2") is True
        assert InputValidator.validate_parameter("10:30:00", "time") is True
        assert InputValidator.validate_parameter(date(2024, 1, 15), "date") is True
        assert InputValidator.validate_parameter(datetime(2024, 1, 15, 8), "timestamp with time zone") is True
        assert InputValidator.validate_parameter("not a date", "datetime") is False
        assert InputValidator.validate_parameter(20240115, "date") is False

    def test_boolean_family(self):
        """✅ 布林型別"""
        assert InputValidator.validate_parameter(True, "bit") is True
        assert InputValidator.validate_parameter(0, "boolean") is True
        assert InputValidator.validate_parameter(1, "bool") is True
        assert InputValidator.validate_parameter(2, "bit") is False
        assert InputValidator.validate_parameter("true", "bit") is False

    def test_unknown_type_passes(self):
        """✅ 未知型別不檢查"""
        assert InputValidator.validate_parameter({"x": 1}, "geography") is True


class TestSecurityEdgeCases:
    """安全邊界測試"""

    def test_sql_injection_payloads(self, sample_malicious_queries):
        """❌ 測試常見的 SQL 注入載荷"""
        for malicious_query in sample_malicious_queries:
            result = SQLValidator.validate_query(malicious_query)
            assert result.is_valid is False, f"Failed to block: {malicious_query}"
            assert result.errors

    def test_whitespace_obfuscation(self):
        """❌ 以換行和 tab 分隔的堆疊語句"""
        query = "SELECT * FROM users;\n\t  DROP TABLE users"
        assert SQLValidator.has_injection_patterns(query) is True
