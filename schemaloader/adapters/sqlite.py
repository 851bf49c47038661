"""SQLite catalog reader using PRAGMA introspection."""

from typing import Optional

from ..models.catalog import ColumnDefinition, ForeignKeyConstraint, TableIdentifier
from .base import CatalogReader


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class SQLiteCatalogReader(CatalogReader):
    """SQLite catalog reader.

    SQLite has no named foreign keys; the PRAGMA's per-table key id is used
    to build a constraint identifier, and a missing referenced column means
    the parent's primary key.
    """

    vendor = "sqlite"
    capabilities = ("pk_auto_sqlite",)
    quote_chars = '"`[]'

    def _pragma_prefix(self, schema: Optional[str]) -> str:
        return f"{_quote(schema)}." if schema else ""

    def _list_tables(self, schema: Optional[str]) -> list[TableIdentifier]:
        rows = self._execute(f"""
            SELECT name FROM {self._pragma_prefix(schema)}sqlite_master
            WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
            ORDER BY name
        """)
        return [self._table(schema, row[0]) for row in rows]

    def _table_info(self, table: TableIdentifier):
        schema, name = self._catalog_name(table)
        return self._execute(
            f"PRAGMA {self._pragma_prefix(schema)}table_info({_quote(name)})",
            table=table.qualified_name,
        )

    def _columns(self, table: TableIdentifier) -> list[ColumnDefinition]:
        columns = []
        for cid, name, data_type, notnull, default, _pk in self._table_info(table):
            columns.append(ColumnDefinition(
                name=self.normalize(name),
                data_type=(data_type or "").lower(),
                nullable=not notnull,
                default=str(default) if default is not None else None,
                ordinal_position=cid + 1,
            ))
        return columns

    def _primary_key(self, table: TableIdentifier) -> list[str]:
        keyed = [(pk, name) for _cid, name, _type, _nn, _dflt, pk in self._table_info(table) if pk]
        return [self.normalize(name) for _pos, name in sorted(keyed)]

    def _foreign_keys(self, table: TableIdentifier) -> list[ForeignKeyConstraint]:
        schema, name = self._catalog_name(table)
        rows = self._execute(
            f"PRAGMA {self._pragma_prefix(schema)}foreign_key_list({_quote(name)})",
            table=table.qualified_name,
        )

        constraints = []
        parent_keys: dict[str, list[str]] = {}
        for fk_id, seq, parent, child_col, parent_col, *_rest in rows:
            parent_table = self._table(schema, parent)
            if parent_col is None:
                # Implicit reference to the parent's primary key
                if parent_table.name not in parent_keys:
                    parent_keys[parent_table.name] = self._primary_key(parent_table)
                keys = parent_keys[parent_table.name]
                parent_col = keys[seq] if seq < len(keys) else ""
            constraints.append(ForeignKeyConstraint(
                name=f"{self.normalize(table.name)}_fk_{fk_id}",
                child_table=self._table(schema, name),
                parent_table=parent_table,
                column_pairs=[(self.normalize(child_col), self.normalize(parent_col))],
            ))
        return constraints
