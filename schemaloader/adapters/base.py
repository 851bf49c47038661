"""Catalog reader contract shared by every database adapter."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import CatalogAccessError
from ..models.catalog import ColumnDefinition, ForeignKeyConstraint, TableIdentifier

logger = logging.getLogger(__name__)


class CatalogReader(ABC):
    """Abstract base class for catalog readers.

    Subclasses issue the vendor-specific catalog queries; this class owns
    the connection lifecycle, error translation and identifier
    normalization, so that callers only ever see lower-cased, unquoted
    identifiers.
    """

    vendor: str = "generic"
    capabilities: tuple[str, ...] = ()
    quote_chars: str = '"'

    def __init__(self, engine: Union[Engine, str], schema_name: Optional[str] = None):
        """Initialize reader with an engine or SQLAlchemy URL.

        Args:
            engine: SQLAlchemy Engine, or a URL to create one from
            schema_name: Default schema to introspect
        """
        if isinstance(engine, str):
            engine = create_engine(engine)
        self.engine: Engine = engine
        self.schema_name = schema_name or None
        self._connection: Optional[Connection] = None
        # Normalized identity -> (schema, name) as spelled in the catalog
        self._catalog_names: dict[tuple[str, str], tuple[Optional[str], str]] = {}

    def connect(self) -> Connection:
        """Open the catalog connection."""
        if self._connection is None:
            try:
                self._connection = self.engine.connect()
            except SQLAlchemyError as e:
                raise CatalogAccessError(f"{self.vendor} connection failed: {e}") from e
            logger.info(f"Connected to {self.vendor} catalog")
        return self._connection

    def disconnect(self):
        """Close the catalog connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug(f"Disconnected from {self.vendor} catalog")

    @property
    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self._connection is not None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def _execute(self, sql: str, params: Optional[dict[str, Any]] = None, table: Optional[str] = None) -> Sequence:
        """Run a catalog query and fetch all rows."""
        conn = self.connect()
        try:
            return conn.execute(text(sql), params or {}).fetchall()
        except SQLAlchemyError as e:
            raise CatalogAccessError(f"Catalog query failed: {e}", table=table) from e

    def normalize(self, identifier: Optional[str]) -> str:
        """Strip quoting artifacts and lower-case an identifier."""
        if identifier is None:
            return ""
        value = str(identifier).strip()
        for char in self.quote_chars:
            value = value.replace(char, "")
        return value.lower()

    def _table(self, schema: Optional[str], name: str) -> TableIdentifier:
        """Build a normalized identifier, remembering the catalog spelling."""
        table = TableIdentifier(schema=self.normalize(schema) or None, name=self.normalize(name))
        self._catalog_names.setdefault(table.normalized, (schema or None, str(name).strip()))
        return table

    def _schema_for(self, table: TableIdentifier) -> Optional[str]:
        return self._catalog_name(table)[0]

    def _catalog_name(self, table: TableIdentifier) -> tuple[Optional[str], str]:
        """Get (schema, name) spelled the way catalog queries must see them.

        Identifiers handed out by this reader are lower-cased; case-sensitive
        catalogs only find the table under its original spelling.
        """
        schema, name = self._catalog_names.get(table.normalized, (table.schema, table.name))
        return schema or self.schema_name, name

    def list_tables(self, schema_filter: Optional[str] = None) -> list[TableIdentifier]:
        """List tables, ordered by name.

        Args:
            schema_filter: Restrict to this schema (defaults to the reader's schema)
        """
        tables = self._list_tables(schema_filter or self.schema_name)
        logger.info(f"Found {len(tables)} tables in {self.vendor} catalog")
        return tables

    def columns_and_primary_key(self, table: TableIdentifier) -> tuple[list[ColumnDefinition], list[str]]:
        """Get ordered columns and primary key columns of a table.

        Raises:
            CatalogAccessError: If the table does not exist or the query fails
        """
        columns = self._columns(table)
        if not columns:
            raise CatalogAccessError("Table not found in catalog", table=table.qualified_name)
        primary_key = self._primary_key(table)
        return columns, primary_key

    def foreign_key_constraints(self, table: TableIdentifier) -> list[ForeignKeyConstraint]:
        """Get foreign keys where `table` is the referencing side.

        Records may hold one column pair each; pairs sharing a constraint
        name belong to one composite key.
        """
        return self._foreign_keys(table)

    @abstractmethod
    def _list_tables(self, schema: Optional[str]) -> list[TableIdentifier]:
        pass

    @abstractmethod
    def _columns(self, table: TableIdentifier) -> list[ColumnDefinition]:
        pass

    @abstractmethod
    def _primary_key(self, table: TableIdentifier) -> list[str]:
        pass

    @abstractmethod
    def _foreign_keys(self, table: TableIdentifier) -> list[ForeignKeyConstraint]:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.engine.url!r}, schema={self.schema_name!r})"
