"""Configuration management for the MCP query gateway."""

import os
from typing import Optional, Literal
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from core.exceptions import ConfigurationError


def _load_env_file() -> Optional[Path]:
    """Load the first .env found; ENV_FILE_PATH, then cwd, then the project root."""
    candidates = []
    explicit = os.getenv("ENV_FILE_PATH")
    if explicit:
        candidates.append(Path(explicit))
    candidates += [Path.cwd() / ".env", Path(__file__).resolve().parents[2] / ".env"]

    for candidate in candidates:
        if candidate.is_file():
            load_dotenv(candidate, override=False)
            return candidate

    # Let python-dotenv walk up from the caller
    load_dotenv()
    return None


_load_env_file()


DatabaseType = Literal["mssql", "postgresql"]

DEFAULT_SCHEMAS = {
    "mssql": "dbo",
    "postgresql": "public",
}

DEFAULT_PORTS = {
    "mssql": 1433,
    "postgresql": 5432,
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


SQLSERVER_DRIVER_PREFERENCE = (
    "ODBC Driver 18 for SQL Server",
    "ODBC Driver 17 for SQL Server",
    "ODBC Driver 13 for SQL Server",
)


def detect_mssql_driver() -> str:
    """Pick the newest installed SQL Server ODBC driver.

    Falls back to any driver whose name mentions SQL Server, and finally
    to Driver 18 so that a missing driver surfaces at connect time.
    """
    try:
        import pyodbc
        installed = pyodbc.drivers()
    except Exception:
        installed = []

    ranked = [name for name in SQLSERVER_DRIVER_PREFERENCE if name in installed]
    ranked += [name for name in installed if "SQL Server" in name]
    return ranked[0] if ranked else SQLSERVER_DRIVER_PREFERENCE[0]


class DatabaseConfig(BaseModel):
    """Connection configuration for the single target database."""

    db_type: DatabaseType = Field(default="mssql", description="Target product")
    server: str = Field(description="Host name or address")
    database: str = Field(description="Catalog to connect to")
    username: Optional[str] = Field(default=None, description="Login name")
    password: Optional[str] = Field(default=None, description="Login password")
    port: Optional[int] = Field(default=None, description="TCP port; per-product default when unset")
    schema_name: Optional[str] = Field(default=None, description="Default schema (dbo / public if None)")
    timeout: int = Field(default=30, description="Seconds to wait for a new connection")
    command_timeout: int = Field(default=30, description="Per-statement timeout in seconds")
    pool_min: int = Field(default=0, ge=0, description="Minimum pooled connections")
    pool_max: int = Field(default=10, ge=1, description="Maximum pooled connections")

    # mssql only
    driver: str = Field(default="ODBC Driver 18 for SQL Server", description="ODBC driver name")
    trusted_connection: bool = Field(default=False, description="Integrated (Windows) authentication")
    encrypt: bool = Field(default=True, description="Request an encrypted channel")
    trust_server_certificate: bool = Field(default=False, description="Accept self-signed server certificates")

    # postgresql only
    sslmode: str = Field(default="prefer", description="libpq-style sslmode")

    def __init__(self, **data):
        super().__init__(**data)
        if self.port is None:
            self.port = DEFAULT_PORTS[self.db_type]

    @property
    def default_schema(self) -> str:
        """Schema used when a tool call does not name one."""
        return self.schema_name or DEFAULT_SCHEMAS[self.db_type]

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Read DB_* (and MSSQL_* for SQL Server) environment variables."""
        db_type = os.getenv("DB_TYPE", "mssql").lower()
        if db_type not in DEFAULT_SCHEMAS:
            raise ConfigurationError(
                f"Unsupported database type: {db_type}",
                details={"supported": sorted(DEFAULT_SCHEMAS)}
            )

        settings = {
            "db_type": db_type,
            "server": os.getenv("DB_HOST", "localhost"),
            "port": int(os.getenv("DB_PORT", str(DEFAULT_PORTS[db_type]))),
            "username": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASSWORD"),
            "schema_name": os.getenv("DB_SCHEMA") or None,
            "timeout": int(os.getenv("DB_TIMEOUT", "30")),
            "command_timeout": int(os.getenv("DB_COMMAND_TIMEOUT", "30")),
            "pool_min": int(os.getenv("DB_POOL_MIN", "0")),
            "pool_max": int(os.getenv("DB_POOL_MAX", "10")),
        }

        if db_type == "mssql":
            settings.update(
                database=os.getenv("DB_NAME", "master"),
                driver=os.getenv("MSSQL_DRIVER") or detect_mssql_driver(),
                trusted_connection=_env_flag("MSSQL_TRUSTED_CONNECTION"),
                encrypt=_env_flag("MSSQL_ENCRYPT", "true"),
                trust_server_certificate=_env_flag("MSSQL_TRUST_CERTIFICATE"),
            )
        else:
            settings.update(
                database=os.getenv("DB_NAME", "postgres"),
                sslmode=os.getenv("DB_SSLMODE", "prefer"),
            )

        return cls(**settings)

    def get_connection_string(self) -> str:
        """Build the ODBC connection string used by the SQL Server pool."""
        attributes = {
            "DRIVER": "{%s}" % self.driver,
            "SERVER": f"{self.server},{self.port}",
            "DATABASE": self.database,
        }

        if self.trusted_connection:
            attributes["Trusted_Connection"] = "yes"
        elif self.username and self.password:
            attributes["UID"] = self.username
            attributes["PWD"] = self.password

        # Driver 18 encrypts unless told otherwise
        attributes["Encrypt"] = "yes" if self.encrypt else "no"
        if self.encrypt and self.trust_server_certificate:
            attributes["TrustServerCertificate"] = "yes"

        return ";".join(f"{key}={value}" for key, value in attributes.items())

    def describe(self) -> dict:
        """Connection summary safe to log (no credentials)."""
        return {
            "db_type": self.db_type,
            "server": self.server,
            "port": self.port,
            "database": self.database,
            "user": self.username,
        }


class QueryConfig(BaseModel):
    """Query validation and sampling limits."""

    max_query_length: int = 10000  # Maximum SQL query length in characters
    sample_row_limit: int = 10     # Default rows returned by get_table_data
    max_sample_row_limit: int = 100

    @classmethod
    def from_env(cls) -> "QueryConfig":
        """Read the query limits from the environment."""
        return cls(
            max_query_length=int(os.getenv("MAX_QUERY_LENGTH", "10000")),
            sample_row_limit=int(os.getenv("SAMPLE_ROW_LIMIT", "10")),
            max_sample_row_limit=int(os.getenv("MAX_SAMPLE_ROW_LIMIT", "100"))
        )


class AppConfig(BaseModel):
    """Everything main.py needs to start the server."""

    database: DatabaseConfig
    query_config: QueryConfig
    server_name: str = Field(default="mssql-mcp", description="MCP server name identifier")
    log_level: str = Field(default="INFO", description="Root logging level")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Assemble the full configuration from the environment."""
        return cls(
            database=DatabaseConfig.from_env(),
            query_config=QueryConfig.from_env(),
            server_name=os.getenv("MCP_SERVER_NAME", "mssql-mcp"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper()
        )
