"""Catalog (metadata) SQL for each supported product.

Every query aliases its columns to the SQL Server INFORMATION_SCHEMA names
(``COLUMN_NAME``, ``IS_NULLABLE``, ...) so one row mapper serves both
products. Parameters use ``@name`` placeholders.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogQueries:
    """Metadata statements for one database product."""

    db_type: str
    list_tables: str
    columns: str
    primary_keys: str
    foreign_keys: str
    indexes: str
    table_exists: str
    views: str
    view_columns: str
    procedures: str
    functions: str
    routine_parameters: str
    search_columns: str
    sample_rows: str  # formatted with {table}; @limit is bound
    ping: str = "SELECT 1 AS test_connection"


MSSQL_CATALOG = CatalogQueries(
    db_type="mssql",
    list_tables="""
        SELECT DISTINCT
            SCHEMA_NAME(schema_id) + '.' + name AS full_name
        FROM sys.tables
        ORDER BY full_name
    """,
    columns="""
        SELECT
            c.COLUMN_NAME,
            c.DATA_TYPE,
            c.CHARACTER_MAXIMUM_LENGTH,
            c.IS_NULLABLE,
            c.COLUMN_DEFAULT,
            c.ORDINAL_POSITION,
            CASE WHEN ic.name IS NOT NULL THEN 1 ELSE 0 END AS IS_IDENTITY,
            CASE WHEN pk.COLUMN_NAME IS NOT NULL THEN 1 ELSE 0 END AS IS_PRIMARY_KEY
        FROM INFORMATION_SCHEMA.COLUMNS c
        LEFT JOIN sys.identity_columns ic
            ON ic.object_id = OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME))
            AND ic.name = c.COLUMN_NAME
        LEFT JOIN (
            SELECT ku.TABLE_SCHEMA, ku.TABLE_NAME, ku.COLUMN_NAME
            FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
            JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
                ON tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
                AND tc.TABLE_SCHEMA = ku.TABLE_SCHEMA
            WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
        ) pk ON pk.TABLE_SCHEMA = c.TABLE_SCHEMA
            AND pk.TABLE_NAME = c.TABLE_NAME
            AND pk.COLUMN_NAME = c.COLUMN_NAME
        WHERE c.TABLE_NAME = @tableName AND c.TABLE_SCHEMA = @schemaName
        ORDER BY c.ORDINAL_POSITION
    """,
    primary_keys="""
        SELECT ku.COLUMN_NAME
        FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
        JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
            ON tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
            AND tc.TABLE_SCHEMA = ku.TABLE_SCHEMA
        WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
            AND tc.TABLE_NAME = @tableName
            AND tc.TABLE_SCHEMA = @schemaName
        ORDER BY ku.ORDINAL_POSITION
    """,
    foreign_keys="""
        SELECT
            fk.name AS CONSTRAINT_NAME,
            c1.name AS COLUMN_NAME,
            s2.name AS REFERENCED_SCHEMA,
            t2.name AS REFERENCED_TABLE,
            c2.name AS REFERENCED_COLUMN
        FROM sys.foreign_keys fk
        JOIN sys.foreign_key_columns fkc ON fk.object_id = fkc.constraint_object_id
        JOIN sys.columns c1 ON fkc.parent_object_id = c1.object_id AND fkc.parent_column_id = c1.column_id
        JOIN sys.columns c2 ON fkc.referenced_object_id = c2.object_id AND fkc.referenced_column_id = c2.column_id
        JOIN sys.tables t1 ON fk.parent_object_id = t1.object_id
        JOIN sys.tables t2 ON fk.referenced_object_id = t2.object_id
        JOIN sys.schemas s1 ON t1.schema_id = s1.schema_id
        JOIN sys.schemas s2 ON t2.schema_id = s2.schema_id
        WHERE t1.name = @tableName AND s1.name = @schemaName
        ORDER BY fk.name, fkc.constraint_column_id
    """,
    indexes="""
        SELECT
            i.name AS INDEX_NAME,
            c.name AS COLUMN_NAME,
            i.is_unique AS IS_UNIQUE,
            i.is_primary_key AS IS_PRIMARY_KEY,
            i.type_desc AS INDEX_TYPE
        FROM sys.indexes i
        JOIN sys.index_columns ic ON i.object_id = ic.object_id AND i.index_id = ic.index_id
        JOIN sys.columns c ON ic.object_id = c.object_id AND ic.column_id = c.column_id
        JOIN sys.tables t ON i.object_id = t.object_id
        JOIN sys.schemas s ON t.schema_id = s.schema_id
        WHERE t.name = @tableName AND s.name = @schemaName
        ORDER BY i.name, ic.key_ordinal
    """,
    table_exists="""
        SELECT COUNT(*) AS TABLE_COUNT
        FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_NAME = @tableName AND TABLE_SCHEMA = @schemaName
    """,
    views="""
        SELECT
            v.TABLE_SCHEMA,
            v.TABLE_NAME,
            v.VIEW_DEFINITION
        FROM INFORMATION_SCHEMA.VIEWS v
        ORDER BY v.TABLE_SCHEMA, v.TABLE_NAME
    """,
    view_columns="""
        SELECT
            c.COLUMN_NAME,
            c.DATA_TYPE,
            c.CHARACTER_MAXIMUM_LENGTH,
            c.IS_NULLABLE,
            c.COLUMN_DEFAULT,
            c.ORDINAL_POSITION
        FROM INFORMATION_SCHEMA.COLUMNS c
        WHERE c.TABLE_NAME = @viewName AND c.TABLE_SCHEMA = @schemaName
        ORDER BY c.ORDINAL_POSITION
    """,
    procedures="""
        SELECT
            r.ROUTINE_SCHEMA,
            r.ROUTINE_NAME,
            r.SPECIFIC_NAME,
            r.ROUTINE_DEFINITION
        FROM INFORMATION_SCHEMA.ROUTINES r
        WHERE r.ROUTINE_TYPE = 'PROCEDURE'
        ORDER BY r.ROUTINE_SCHEMA, r.ROUTINE_NAME
    """,
    functions="""
        SELECT
            r.ROUTINE_SCHEMA,
            r.ROUTINE_NAME,
            r.SPECIFIC_NAME,
            r.ROUTINE_DEFINITION,
            r.DATA_TYPE AS RETURN_TYPE
        FROM INFORMATION_SCHEMA.ROUTINES r
        WHERE r.ROUTINE_TYPE = 'FUNCTION'
        ORDER BY r.ROUTINE_SCHEMA, r.ROUTINE_NAME
    """,
    routine_parameters="""
        SELECT
            p.PARAMETER_NAME,
            p.DATA_TYPE,
            p.CHARACTER_MAXIMUM_LENGTH,
            p.PARAMETER_MODE,
            p.IS_RESULT,
            p.ORDINAL_POSITION
        FROM INFORMATION_SCHEMA.PARAMETERS p
        WHERE p.SPECIFIC_NAME = @routineName AND p.SPECIFIC_SCHEMA = @schemaName
        ORDER BY p.ORDINAL_POSITION
    """,
    search_columns="""
        SELECT
            c.TABLE_SCHEMA,
            c.TABLE_NAME,
            c.COLUMN_NAME,
            c.DATA_TYPE
        FROM INFORMATION_SCHEMA.COLUMNS c
        WHERE c.COLUMN_NAME LIKE @pattern
        ORDER BY c.TABLE_SCHEMA, c.TABLE_NAME, c.ORDINAL_POSITION
    """,
    sample_rows="SELECT TOP (@limit) * FROM {table}",
)


POSTGRESQL_CATALOG = CatalogQueries(
    db_type="postgresql",
    list_tables="""
        SELECT table_schema || '.' || table_name AS full_name
        FROM information_schema.tables
        WHERE table_type = 'BASE TABLE'
            AND table_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY full_name
    """,
    columns="""
        SELECT
            c.column_name AS "COLUMN_NAME",
            c.data_type AS "DATA_TYPE",
            c.character_maximum_length AS "CHARACTER_MAXIMUM_LENGTH",
            c.is_nullable AS "IS_NULLABLE",
            c.column_default AS "COLUMN_DEFAULT",
            c.ordinal_position AS "ORDINAL_POSITION",
            CASE WHEN c.is_identity = 'YES' OR c.column_default LIKE 'nextval(%' THEN 1 ELSE 0 END AS "IS_IDENTITY",
            CASE WHEN pk.column_name IS NOT NULL THEN 1 ELSE 0 END AS "IS_PRIMARY_KEY"
        FROM information_schema.columns c
        LEFT JOIN (
            SELECT ku.table_schema, ku.table_name, ku.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage ku
                ON tc.constraint_name = ku.constraint_name
                AND tc.table_schema = ku.table_schema
            WHERE tc.constraint_type = 'PRIMARY KEY'
        ) pk ON pk.table_schema = c.table_schema
            AND pk.table_name = c.table_name
            AND pk.column_name = c.column_name
        WHERE c.table_name = @tableName::text AND c.table_schema = @schemaName::text
        ORDER BY c.ordinal_position
    """,
    primary_keys="""
        SELECT ku.column_name AS "COLUMN_NAME"
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage ku
            ON tc.constraint_name = ku.constraint_name
            AND tc.table_schema = ku.table_schema
        WHERE tc.constraint_type = 'PRIMARY KEY'
            AND tc.table_name = @tableName::text
            AND tc.table_schema = @schemaName::text
        ORDER BY ku.ordinal_position
    """,
    foreign_keys="""
        SELECT
            con.conname AS "CONSTRAINT_NAME",
            att.attname AS "COLUMN_NAME",
            rns.nspname AS "REFERENCED_SCHEMA",
            rcl.relname AS "REFERENCED_TABLE",
            ratt.attname AS "REFERENCED_COLUMN"
        FROM pg_constraint con
        JOIN pg_class cl ON cl.oid = con.conrelid
        JOIN pg_namespace ns ON ns.oid = cl.relnamespace
        JOIN pg_class rcl ON rcl.oid = con.confrelid
        JOIN pg_namespace rns ON rns.oid = rcl.relnamespace
        CROSS JOIN LATERAL unnest(con.conkey, con.confkey) AS k(attnum, refnum)
        JOIN pg_attribute att ON att.attrelid = con.conrelid AND att.attnum = k.attnum
        JOIN pg_attribute ratt ON ratt.attrelid = con.confrelid AND ratt.attnum = k.refnum
        WHERE con.contype = 'f'
            AND cl.relname = @tableName::text
            AND ns.nspname = @schemaName::text
        ORDER BY con.conname
    """,
    indexes="""
        SELECT
            ic.relname AS "INDEX_NAME",
            a.attname AS "COLUMN_NAME",
            ix.indisunique AS "IS_UNIQUE",
            ix.indisprimary AS "IS_PRIMARY_KEY",
            am.amname AS "INDEX_TYPE"
        FROM pg_index ix
        JOIN pg_class t ON t.oid = ix.indrelid
        JOIN pg_namespace n ON n.oid = t.relnamespace
        JOIN pg_class ic ON ic.oid = ix.indexrelid
        JOIN pg_am am ON am.oid = ic.relam
        JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey)
        WHERE t.relname = @tableName::text AND n.nspname = @schemaName::text
        ORDER BY ic.relname, a.attnum
    """,
    table_exists="""
        SELECT COUNT(*) AS "TABLE_COUNT"
        FROM information_schema.tables
        WHERE table_name = @tableName::text AND table_schema = @schemaName::text
    """,
    views="""
        SELECT
            v.table_schema AS "TABLE_SCHEMA",
            v.table_name AS "TABLE_NAME",
            v.view_definition AS "VIEW_DEFINITION"
        FROM information_schema.views v
        WHERE v.table_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY v.table_schema, v.table_name
    """,
    view_columns="""
        SELECT
            c.column_name AS "COLUMN_NAME",
            c.data_type AS "DATA_TYPE",
            c.character_maximum_length AS "CHARACTER_MAXIMUM_LENGTH",
            c.is_nullable AS "IS_NULLABLE",
            c.column_default AS "COLUMN_DEFAULT",
            c.ordinal_position AS "ORDINAL_POSITION"
        FROM information_schema.columns c
        WHERE c.table_name = @viewName::text AND c.table_schema = @schemaName::text
        ORDER BY c.ordinal_position
    """,
    procedures="""
        SELECT
            r.routine_schema AS "ROUTINE_SCHEMA",
            r.routine_name AS "ROUTINE_NAME",
            r.specific_name AS "SPECIFIC_NAME",
            r.routine_definition AS "ROUTINE_DEFINITION"
        FROM information_schema.routines r
        WHERE r.routine_type = 'PROCEDURE'
            AND r.routine_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY r.routine_schema, r.routine_name
    """,
    functions="""
        SELECT
            r.routine_schema AS "ROUTINE_SCHEMA",
            r.routine_name AS "ROUTINE_NAME",
            r.specific_name AS "SPECIFIC_NAME",
            r.routine_definition AS "ROUTINE_DEFINITION",
            r.data_type AS "RETURN_TYPE"
        FROM information_schema.routines r
        WHERE r.routine_type = 'FUNCTION'
            AND r.routine_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY r.routine_schema, r.routine_name
    """,
    routine_parameters="""
        SELECT
            p.parameter_name AS "PARAMETER_NAME",
            p.data_type AS "DATA_TYPE",
            p.character_maximum_length AS "CHARACTER_MAXIMUM_LENGTH",
            p.parameter_mode AS "PARAMETER_MODE",
            p.ordinal_position AS "ORDINAL_POSITION"
        FROM information_schema.parameters p
        WHERE p.specific_schema = @schemaName::text
            AND (
                p.specific_name = @routineName::text
                OR p.specific_name IN (
                    SELECT r.specific_name
                    FROM information_schema.routines r
                    WHERE r.routine_name = @routineName::text
                        AND r.routine_schema = @schemaName::text
                )
            )
        ORDER BY p.ordinal_position
    """,
    search_columns="""
        SELECT
            c.table_schema AS "TABLE_SCHEMA",
            c.table_name AS "TABLE_NAME",
            c.column_name AS "COLUMN_NAME",
            c.data_type AS "DATA_TYPE"
        FROM information_schema.columns c
        WHERE c.column_name ILIKE @pattern::text
            AND c.table_schema NOT IN ('pg_catalog', 'information_schema')
        ORDER BY c.table_schema, c.table_name, c.ordinal_position
    """,
    sample_rows="SELECT * FROM {table} LIMIT @limit",
)


_CATALOGS = {
    "mssql": MSSQL_CATALOG,
    "postgresql": POSTGRESQL_CATALOG,
}


def get_catalog(db_type: str) -> CatalogQueries:
    """Return the catalog queries for a database type.

    Raises:
        ValueError: If database type is not supported
    """
    try:
        return _CATALOGS[db_type.lower()]
    except KeyError:
        raise ValueError(f"Unsupported database type: {db_type}") from None
