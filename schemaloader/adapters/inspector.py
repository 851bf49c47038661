"""Dialect-independent catalog reader built on the SQLAlchemy inspector."""

from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine.reflection import Inspector
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from ..exceptions import CatalogAccessError
from ..models.catalog import ColumnDefinition, ForeignKeyConstraint, TableIdentifier
from .base import CatalogReader


class InspectorCatalogReader(CatalogReader):
    """Catalog reader for any dialect SQLAlchemy can reflect (Oracle, etc.)."""

    vendor = "generic"
    capabilities = ("pk_auto",)
    quote_chars = '"`[]'

    def _inspector(self) -> Inspector:
        return inspect(self.connect())

    def _reflect(self, method: str, table: Optional[TableIdentifier] = None, **kwargs):
        try:
            return getattr(self._inspector(), method)(**kwargs)
        except NoSuchTableError as e:
            raise CatalogAccessError("Table not found in catalog", table=table.qualified_name if table else None) from e
        except SQLAlchemyError as e:
            raise CatalogAccessError(
                f"Catalog reflection failed: {e}",
                table=table.qualified_name if table else None,
            ) from e

    def _list_tables(self, schema: Optional[str]) -> list[TableIdentifier]:
        names = self._reflect("get_table_names", schema=schema)
        return [self._table(schema, name) for name in sorted(names)]

    def _columns(self, table: TableIdentifier) -> list[ColumnDefinition]:
        schema, name = self._catalog_name(table)
        columns = []
        for col in self._reflect("get_columns", table, table_name=name, schema=schema):
            columns.append(ColumnDefinition(
                name=self.normalize(col["name"]),
                data_type=str(col["type"]).lower(),
                nullable=col.get("nullable", True),
                default=str(col.get("default")) if col.get("default") is not None else None,
                ordinal_position=len(columns) + 1,
            ))
        return columns

    def _primary_key(self, table: TableIdentifier) -> list[str]:
        schema, name = self._catalog_name(table)
        pk = self._reflect("get_pk_constraint", table, table_name=name, schema=schema)
        return [self.normalize(col) for col in (pk or {}).get("constrained_columns") or []]

    def _foreign_keys(self, table: TableIdentifier) -> list[ForeignKeyConstraint]:
        schema, name = self._catalog_name(table)
        constraints = []
        for index, fk in enumerate(self._reflect("get_foreign_keys", table, table_name=name, schema=schema)):
            child_cols = fk.get("constrained_columns", [])
            ref_cols = fk.get("referred_columns", [])
            constraint_name = fk.get("name") or f"{self.normalize(table.name)}_fk_{index}"
            constraints.append(ForeignKeyConstraint(
                name=self.normalize(constraint_name),
                child_table=self._table(schema, name),
                parent_table=self._table(fk.get("referred_schema") or schema, fk.get("referred_table", "")),
                column_pairs=[
                    (self.normalize(child), self.normalize(parent))
                    for child, parent in zip(child_cols, ref_cols)
                ],
            ))
        return constraints
