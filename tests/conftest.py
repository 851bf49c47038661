"""Shared fixtures: an in-memory catalog reader and a real SQLite catalog."""

import pytest
from sqlalchemy import create_engine, event

from schemaloader.adapters.base import CatalogReader
from schemaloader.exceptions import CatalogAccessError
from schemaloader.models.catalog import ColumnDefinition, ForeignKeyConstraint, TableIdentifier


def cols(*names, types=None):
    """Build integer column definitions, in order."""
    return [
        ColumnDefinition(name=name, data_type=(types or {}).get(name, "integer"), ordinal_position=i + 1)
        for i, name in enumerate(names)
    ]


def fk(name, child, parent, *pairs):
    """Build a foreign key record from (child column, parent column) pairs."""
    return ForeignKeyConstraint(
        name=name,
        child_table=TableIdentifier(name=child),
        parent_table=TableIdentifier(name=parent),
        column_pairs=list(pairs),
    )


class FakeCatalogReader(CatalogReader):
    """Catalog reader serving tables from dictionaries."""

    vendor = "fake"
    capabilities = ("pk_auto",)

    def __init__(self, tables=None, foreign_keys=None, broken_foreign_keys=()):
        super().__init__("sqlite://")
        self.tables = tables or {}
        self.foreign_keys = foreign_keys or {}
        self.broken_foreign_keys = set(broken_foreign_keys)
        self.connect_calls = 0
        self.disconnect_calls = 0

    def connect(self):
        self.connect_calls += 1
        self._connection = "fake-connection"
        return self._connection

    def disconnect(self):
        self.disconnect_calls += 1
        self._connection = None

    def _list_tables(self, schema):
        return [TableIdentifier(schema=schema, name=name) for name in self.tables]

    def _columns(self, table):
        columns, _pk = self.tables.get(table.name, ([], []))
        return columns

    def _primary_key(self, table):
        _columns, pk = self.tables.get(table.name, ([], []))
        return pk

    def _foreign_keys(self, table):
        if table.name in self.broken_foreign_keys:
            raise CatalogAccessError("connection reset by peer", table=table.name)
        return self.foreign_keys.get(table.name, [])


@pytest.fixture
def shop_reader():
    """Customers, orders, shippers and invoices with single-column keys."""
    return FakeCatalogReader(
        tables={
            "customer": (cols("id", "name"), ["id"]),
            "order": (cols("id", "customer_id", "shipper_id"), ["id"]),
            "shipper": (cols("id"), ["id"]),
            "invoice": (cols("id", "order_id"), ["id"]),
        },
        foreign_keys={
            "order": [
                fk("fk_order_shipper", "order", "shipper", ("shipper_id", "id")),
                fk("fk_order_customer", "order", "customer", ("customer_id", "id")),
            ],
            "invoice": [
                fk("fk_invoice_order", "invoice", "order", ("order_id", "id")),
            ],
        },
    )


@pytest.fixture
def sqlite_engine(tmp_path):
    """A SQLite database file with a small schema."""
    engine = create_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    with engine.begin() as conn:
        conn.exec_driver_sql(
            "CREATE TABLE customer (id INTEGER PRIMARY KEY, name TEXT NOT NULL)"
        )
        conn.exec_driver_sql(
            'CREATE TABLE "order" (id INTEGER PRIMARY KEY, '
            "customer_id INTEGER REFERENCES customer(id), note TEXT)"
        )
        conn.exec_driver_sql(
            "CREATE TABLE note (id INTEGER PRIMARY KEY, customer_id INTEGER REFERENCES customer)"
        )
        conn.exec_driver_sql(
            "CREATE TABLE account (bank_id INTEGER, number TEXT, PRIMARY KEY (bank_id, number))"
        )
        conn.exec_driver_sql(
            "CREATE TABLE transfer (id INTEGER PRIMARY KEY, bank_id INTEGER, account_number TEXT, "
            "FOREIGN KEY (bank_id, account_number) REFERENCES account (bank_id, number))"
        )
        conn.exec_driver_sql("CREATE TABLE audit_log (message TEXT)")
    yield engine
    engine.dispose()


@pytest.fixture
def mixed_case_catalog_engine(tmp_path):
    """SQLite with an attached, case-sensitive information_schema.

    Describes public."Customers" and public."CustomerOrders", with a foreign
    key from CustomerOrders.CustomerId to Customers.Id.
    """
    catalog_path = tmp_path / "information_schema.db"
    engine = create_engine(f"sqlite:///{tmp_path / 'main.db'}")

    @event.listens_for(engine, "connect")
    def attach_catalog(dbapi_connection, _connection_record):
        dbapi_connection.execute(f"ATTACH DATABASE '{catalog_path}' AS information_schema")

    statements = [
        "CREATE TABLE information_schema.tables (table_schema TEXT, table_name TEXT, table_type TEXT)",
        "CREATE TABLE information_schema.columns (table_schema TEXT, table_name TEXT, column_name TEXT, "
        "data_type TEXT, is_nullable TEXT, column_default TEXT, ordinal_position INTEGER)",
        "CREATE TABLE information_schema.table_constraints (constraint_schema TEXT, constraint_name TEXT, "
        "table_schema TEXT, table_name TEXT, constraint_type TEXT)",
        "CREATE TABLE information_schema.key_column_usage (constraint_schema TEXT, constraint_name TEXT, "
        "table_schema TEXT, table_name TEXT, column_name TEXT, ordinal_position INTEGER, "
        "position_in_unique_constraint INTEGER)",
        "CREATE TABLE information_schema.referential_constraints (constraint_schema TEXT, "
        "constraint_name TEXT, unique_constraint_schema TEXT, unique_constraint_name TEXT)",
        "INSERT INTO information_schema.tables VALUES "
        "('public', 'Customers', 'BASE TABLE'), ('public', 'CustomerOrders', 'BASE TABLE')",
        "INSERT INTO information_schema.columns VALUES "
        "('public', 'Customers', 'Id', 'integer', 'NO', NULL, 1), "
        "('public', 'Customers', 'Name', 'text', 'YES', NULL, 2), "
        "('public', 'CustomerOrders', 'Id', 'integer', 'NO', NULL, 1), "
        "('public', 'CustomerOrders', 'CustomerId', 'integer', 'YES', NULL, 2)",
        "INSERT INTO information_schema.table_constraints VALUES "
        "('public', 'Customers_pkey', 'public', 'Customers', 'PRIMARY KEY'), "
        "('public', 'CustomerOrders_pkey', 'public', 'CustomerOrders', 'PRIMARY KEY'), "
        "('public', 'FK_Orders_Customers', 'public', 'CustomerOrders', 'FOREIGN KEY')",
        "INSERT INTO information_schema.key_column_usage VALUES "
        "('public', 'Customers_pkey', 'public', 'Customers', 'Id', 1, NULL), "
        "('public', 'CustomerOrders_pkey', 'public', 'CustomerOrders', 'Id', 1, NULL), "
        "('public', 'FK_Orders_Customers', 'public', 'CustomerOrders', 'CustomerId', 1, 1)",
        "INSERT INTO information_schema.referential_constraints VALUES "
        "('public', 'FK_Orders_Customers', 'public', 'Customers_pkey')",
    ]
    with engine.begin() as conn:
        for statement in statements:
            conn.exec_driver_sql(statement)
    yield engine
    engine.dispose()
