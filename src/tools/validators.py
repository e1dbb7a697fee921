"""Input validators for security and data integrity."""

import math
import re
from datetime import date, datetime, time
from typing import Any, List, NamedTuple, Optional


class ValidationResult(NamedTuple):
    """Outcome of ``SQLValidator.validate_query``."""

    is_valid: bool
    errors: List[str]


class SQLValidator:
    """Pattern-based SQL safety checks.

    This is a heuristic, not a parser: keywords are matched as substrings,
    so text such as ``SELECT 'created' FROM t`` is rejected too.
    """

    # Statements a read-only query may start with
    # First token must be SELECT or WITH (CTEs)
    READ_ONLY_START = re.compile(r'(SELECT|WITH)\b')

    # Rejected anywhere in a read-only query
    DANGEROUS_KEYWORDS = (
        'DROP', 'DELETE', 'TRUNCATE', 'ALTER', 'CREATE', 'INSERT', 'UPDATE',
        'EXEC', 'EXECUTE', 'SP_', 'XP_', 'SHUTDOWN', 'KILL'
    )

    INJECTION_PATTERNS = (
        re.compile(r';\s*(DROP|DELETE|TRUNCATE|ALTER|CREATE|INSERT|UPDATE)', re.IGNORECASE),
        re.compile(r'UNION\s+SELECT', re.IGNORECASE),
        re.compile(r'--'),
        re.compile(r'/\*'),
        re.compile(r'\*/'),
        re.compile(r'xp_', re.IGNORECASE),
        re.compile(r'sp_', re.IGNORECASE),
        re.compile(r'EXEC\s*\(', re.IGNORECASE),
        re.compile(r'EXECUTE\s*\(', re.IGNORECASE),
    )

    PROCEDURE_NAME = re.compile(r'^[a-zA-Z][a-zA-Z0-9_]*(\.[a-zA-Z][a-zA-Z0-9_]*)?$')

    DEFAULT_MAX_LENGTH = 10000

    @classmethod
    def is_read_only_query(cls, query: str) -> bool:
        """True only for SELECT/WITH text free of every dangerous keyword."""
        normalized = query.strip().upper()

        for keyword in cls.DANGEROUS_KEYWORDS:
            if keyword in normalized:
                return False

        return bool(cls.READ_ONLY_START.match(normalized))

    @classmethod
    def has_injection_patterns(cls, query: str) -> bool:
        """True when the text looks like an injection attempt."""
        return any(pattern.search(query) for pattern in cls.INJECTION_PATTERNS)

    @classmethod
    def is_valid_length(cls, query: str, max_length: Optional[int] = None) -> bool:
        if max_length is None:
            max_length = cls.DEFAULT_MAX_LENGTH
        return len(query) <= max_length

    @classmethod
    def is_valid_procedure_name(cls, procedure_name: str) -> bool:
        """``name`` or ``schema.name``; each part starts with a letter."""
        return bool(cls.PROCEDURE_NAME.match(procedure_name))

    @classmethod
    def validate_query(
        cls,
        query: str,
        allow_write: bool = False,
        max_length: Optional[int] = None
    ) -> ValidationResult:
        """
        Run every check and collect one message per failure.

        Args:
            query: SQL query string to validate
            allow_write: Skip the read-only check
            max_length: Maximum length (defaults to 10000 characters)

        Returns:
            ValidationResult(is_valid, errors)
        """
        errors = []

        if not cls.is_valid_length(query, max_length):
            errors.append("Query exceeds maximum allowed length")

        if cls.has_injection_patterns(query):
            errors.append("Query contains potentially dangerous patterns")

        if not allow_write and not cls.is_read_only_query(query):
            errors.append("Only read-only queries are allowed")

        return ValidationResult(is_valid=not errors, errors=errors)


class InputValidator:
    """Identifier sanitizing and parameter value checks."""

    MAX_IDENTIFIER_LENGTH = 128

    INTEGER_TYPES = {
        'int', 'bigint', 'smallint', 'tinyint', 'integer',
        'int2', 'int4', 'int8', 'serial', 'bigserial', 'smallserial'
    }
    DECIMAL_TYPES = {
        'decimal', 'numeric', 'float', 'real', 'money', 'smallmoney',
        'double precision', 'float4', 'float8'
    }
    STRING_TYPES = {
        'varchar', 'nvarchar', 'char', 'nchar', 'text', 'ntext',
        'character varying', 'character', 'uniqueidentifier', 'uuid', 'xml', 'sysname'
    }
    DATETIME_TYPES = {
        'datetime', 'datetime2', 'smalldatetime', 'date', 'time', 'datetimeoffset',
        'timestamp', 'timestamptz', 'timestamp without time zone',
        'timestamp with time zone', 'time without time zone', 'time with time zone'
    }
    BOOLEAN_TYPES = {'bit', 'boolean', 'bool'}

    _IDENTIFIER_CHARS = re.compile(r'[^A-Za-z0-9_.]')
    _PARAMETER_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
    _TYPE_SUFFIX = re.compile(r'\(.*\)')

    @classmethod
    def sanitize_identifier(cls, identifier: Optional[str]) -> str:
        """Keep only ``[A-Za-z0-9_.]`` and cap the length at 128."""
        if not identifier:
            return ""
        return cls._IDENTIFIER_CHARS.sub('', identifier)[:cls.MAX_IDENTIFIER_LENGTH]

    @classmethod
    def is_identifier(cls, name: str) -> bool:
        """Whether ``name`` (optionally ``@``-prefixed) is a plain identifier."""
        if not isinstance(name, str):
            return False
        if name.startswith('@'):
            name = name[1:]
        return bool(cls._PARAMETER_NAME.match(name))

    @staticmethod
    def is_bindable_value(value: Any) -> bool:
        """Scalars a driver can bind directly."""
        if value is None or isinstance(value, (bool, int, str)):
            return True
        return isinstance(value, float) and math.isfinite(value)

    @staticmethod
    def _to_number(value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return float(value)
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return None

    @staticmethod
    def _is_temporal(value: Any) -> bool:
        if isinstance(value, (date, datetime, time)):
            return True
        if not isinstance(value, str) or not value.strip():
            return False
        text = value.strip()
        for parse in (datetime.fromisoformat, date.fromisoformat, time.fromisoformat):
            try:
                parse(text)
                return True
            except ValueError:
                continue
        return False

    @classmethod
    def normalize_type(cls, data_type: str) -> str:
        """``NVARCHAR(50)`` -> ``nvarchar``."""
        return cls._TYPE_SUFFIX.sub('', data_type or '').strip().lower()

    @classmethod
    def validate_parameter(cls, value: Any, data_type: str) -> bool:
        """
        Check a value against a declared SQL type.

        NULL always passes, and so do types this validator does not know.

        Args:
            value: Value to bind
            data_type: Declared type, e.g. ``int`` or ``nvarchar(50)``

        Returns:
            True if the value is acceptable for the type
        """
        if value is None:
            return True

        declared = cls.normalize_type(data_type)

        if declared in cls.INTEGER_TYPES:
            if isinstance(value, int):
                return True
            number = cls._to_number(value)
            return number is not None and math.isfinite(number) and number.is_integer()

        if declared in cls.DECIMAL_TYPES:
            number = cls._to_number(value)
            return number is not None and math.isfinite(number)

        if declared in cls.STRING_TYPES:
            return isinstance(value, str)

        if declared in cls.DATETIME_TYPES:
            return cls._is_temporal(value)

        if declared in cls.BOOLEAN_TYPES:
            return isinstance(value, bool) or (isinstance(value, (int, float)) and value in (0, 1))

        # Unknown types are not checked
        return True

    @staticmethod
    def clamp_limit(limit: int, maximum: int) -> int:
        """Clamp a requested row limit into ``[1, maximum]``."""
        return min(max(1, limit), maximum)
