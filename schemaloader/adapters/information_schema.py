"""Catalog readers for databases exposing INFORMATION_SCHEMA views."""

from typing import Optional

from ..models.catalog import ColumnDefinition, ForeignKeyConstraint, TableIdentifier
from .base import CatalogReader


class InformationSchemaReader(CatalogReader):
    """Shared implementation driven by per-vendor SQL.

    Every query takes `:schema` and, except the table listing, `:table`.
    The foreign key query must return rows of
    (constraint_name, column, ref_schema, ref_table, ref_column) ordered by
    constraint name and column position.
    """

    default_schema: Optional[str] = None

    TABLES_SQL = """
        SELECT table_schema, table_name
        FROM information_schema.tables
        WHERE table_schema = :schema AND table_type = 'BASE TABLE'
        ORDER BY table_name
    """

    COLUMNS_SQL = """
        SELECT column_name, data_type, is_nullable, column_default, ordinal_position
        FROM information_schema.columns
        WHERE table_schema = :schema AND table_name = :table
        ORDER BY ordinal_position
    """

    PRIMARY_KEY_SQL = """
        SELECT ku.column_name
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage ku
            ON tc.constraint_schema = ku.constraint_schema
            AND tc.constraint_name = ku.constraint_name
            AND tc.table_name = ku.table_name
        WHERE tc.table_schema = :schema
            AND tc.table_name = :table
            AND tc.constraint_type = 'PRIMARY KEY'
        ORDER BY ku.ordinal_position
    """

    FOREIGN_KEYS_SQL: str = ""

    def _resolve_schema(self, schema: Optional[str]) -> Optional[str]:
        return schema or self.schema_name or self.default_schema

    def _list_tables(self, schema: Optional[str]) -> list[TableIdentifier]:
        rows = self._execute(self.TABLES_SQL, {"schema": self._resolve_schema(schema)})
        return [self._table(row[0], row[1]) for row in rows]

    def _params(self, table: TableIdentifier) -> dict:
        schema, name = self._catalog_name(table)
        return {"schema": self._resolve_schema(schema), "table": name}

    def _columns(self, table: TableIdentifier) -> list[ColumnDefinition]:
        rows = self._execute(self.COLUMNS_SQL, self._params(table), table=table.qualified_name)
        return [
            ColumnDefinition(
                name=self.normalize(name),
                data_type=str(data_type).lower(),
                nullable=str(is_nullable).upper() == "YES",
                default=str(default) if default is not None else None,
                ordinal_position=int(position),
            )
            for name, data_type, is_nullable, default, position in rows
        ]

    def _primary_key(self, table: TableIdentifier) -> list[str]:
        rows = self._execute(self.PRIMARY_KEY_SQL, self._params(table), table=table.qualified_name)
        return [self.normalize(row[0]) for row in rows]

    def _foreign_keys(self, table: TableIdentifier) -> list[ForeignKeyConstraint]:
        rows = self._execute(self.FOREIGN_KEYS_SQL, self._params(table), table=table.qualified_name)
        schema, name = self._catalog_name(table)
        child_table = self._table(self._resolve_schema(schema), name)

        constraints = []
        for constraint_name, column, ref_schema, ref_table, ref_column in rows:
            constraints.append(ForeignKeyConstraint(
                name=self.normalize(constraint_name),
                child_table=child_table,
                parent_table=self._table(ref_schema, ref_table),
                column_pairs=[(self.normalize(column), self.normalize(ref_column))],
            ))
        return constraints


class PostgresCatalogReader(InformationSchemaReader):
    """PostgreSQL catalog reader."""

    vendor = "postgresql"
    capabilities = ("pk_auto_pg",)
    quote_chars = '"'
    default_schema = "public"

    FOREIGN_KEYS_SQL = """
        SELECT
            kcu.constraint_name,
            kcu.column_name,
            ukcu.table_schema AS ref_schema,
            ukcu.table_name AS ref_table,
            ukcu.column_name AS ref_column
        FROM information_schema.referential_constraints rc
        JOIN information_schema.key_column_usage kcu
            ON kcu.constraint_schema = rc.constraint_schema
            AND kcu.constraint_name = rc.constraint_name
        JOIN information_schema.key_column_usage ukcu
            ON ukcu.constraint_schema = rc.unique_constraint_schema
            AND ukcu.constraint_name = rc.unique_constraint_name
            AND ukcu.ordinal_position = kcu.position_in_unique_constraint
        WHERE kcu.table_schema = :schema AND kcu.table_name = :table
        ORDER BY kcu.constraint_name, kcu.ordinal_position
    """


class MySQLCatalogReader(InformationSchemaReader):
    """MySQL / MariaDB catalog reader. The schema is the database name."""

    vendor = "mysql"
    capabilities = ("pk_auto_mysql",)
    quote_chars = "`"

    FOREIGN_KEYS_SQL = """
        SELECT
            CONSTRAINT_NAME,
            COLUMN_NAME,
            REFERENCED_TABLE_SCHEMA,
            REFERENCED_TABLE_NAME,
            REFERENCED_COLUMN_NAME
        FROM information_schema.KEY_COLUMN_USAGE
        WHERE TABLE_SCHEMA = :schema
            AND TABLE_NAME = :table
            AND REFERENCED_TABLE_NAME IS NOT NULL
        ORDER BY CONSTRAINT_NAME, ORDINAL_POSITION
    """

    def _resolve_schema(self, schema: Optional[str]) -> Optional[str]:
        resolved = super()._resolve_schema(schema)
        if resolved:
            return resolved
        row = self._execute("SELECT DATABASE()")
        return row[0][0] if row else None


class SQLServerCatalogReader(InformationSchemaReader):
    """SQL Server catalog reader."""

    vendor = "sqlserver"
    capabilities = ("pk_auto_mssql",)
    quote_chars = '"[]'
    default_schema = "dbo"

    FOREIGN_KEYS_SQL = """
        SELECT
            fk.name AS constraint_name,
            pc.name AS column_name,
            SCHEMA_NAME(rt.schema_id) AS ref_schema,
            rt.name AS ref_table,
            rc.name AS ref_column
        FROM sys.foreign_keys fk
        JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id
        JOIN sys.tables pt ON pt.object_id = fk.parent_object_id
        JOIN sys.columns pc ON pc.object_id = fkc.parent_object_id AND pc.column_id = fkc.parent_column_id
        JOIN sys.tables rt ON rt.object_id = fk.referenced_object_id
        JOIN sys.columns rc ON rc.object_id = fkc.referenced_object_id AND rc.column_id = fkc.referenced_column_id
        WHERE SCHEMA_NAME(pt.schema_id) = :schema AND pt.name = :table
        ORDER BY fk.name, fkc.constraint_column_id
    """
