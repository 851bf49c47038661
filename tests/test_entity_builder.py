"""Unit tests for the entity builder."""

import re
import warnings

import pytest
from conftest import FakeCatalogReader, cols
from schemaloader.config import LoaderConfig
from schemaloader.entity_builder import EntityBuilder
from schemaloader.exceptions import CatalogAccessError, DuplicateMonikerError, MissingPrimaryKeyWarning
from schemaloader.models import EntityRegistry, TableIdentifier
from schemaloader.naming import NamingEngine


def make_builder(reader, **kwargs):
    return EntityBuilder(reader, EntityRegistry(), NamingEngine(), **kwargs)


class TestFilters:
    """Tests for inclusion and exclusion patterns."""

    def test_exclusion_wins_over_inclusion(self):
        config = LoaderConfig(table_include="^usr_", table_exclude="_tmp$")
        builder = make_builder(FakeCatalogReader(), include=config.table_include, exclude=config.table_exclude)

        assert builder.accepts(TableIdentifier(name="usr_tmp")) is False
        assert builder.accepts(TableIdentifier(name="usr_accounts")) is True
        assert builder.accepts(TableIdentifier(name="log_accounts")) is False

    def test_qualified_names_also_match(self):
        builder = make_builder(FakeCatalogReader(), include=re.compile("^usr_"), exclude=re.compile(r"^archive\."))
        assert builder.accepts(TableIdentifier(schema="public", name="usr_accounts")) is True
        assert builder.accepts(TableIdentifier(schema="archive", name="usr_accounts")) is False

    def test_filtered_table_is_skipped(self):
        reader = FakeCatalogReader(tables={"log_accounts": (cols("id"), ["id"])})
        builder = make_builder(reader, include=re.compile("^usr_"))
        assert builder.build(TableIdentifier(name="log_accounts")) is None
        assert len(builder.registry) == 0


class TestBuild:
    """Tests for building and registering entities."""

    def test_builds_entity(self):
        reader = FakeCatalogReader(tables={"order_items": (cols("order_id", "line", "qty"), ["order_id", "line"])})
        builder = make_builder(reader, capabilities=["core", "pk_auto"])

        entity = builder.build(TableIdentifier(name="order_items"))

        assert entity.moniker == "OrderItems"
        assert entity.column_names == ["order_id", "line", "qty"]
        assert entity.primary_key == ["order_id", "line"]
        assert entity.capabilities == ["core", "pk_auto"]
        assert builder.registry.get(TableIdentifier(name="ORDER_ITEMS")) is entity

    def test_build_is_idempotent(self):
        reader = FakeCatalogReader(tables={"customer": (cols("id"), ["id"])})
        builder = make_builder(reader)

        first = builder.build(TableIdentifier(name="customer"))
        second = builder.build(TableIdentifier(name="Customer"))

        assert first is second
        assert len(builder.registry) == 1

    def test_missing_primary_key_warns_and_continues(self, caplog):
        reader = FakeCatalogReader(tables={"audit_log": (cols("message"), [])})
        builder = make_builder(reader)

        with pytest.warns(MissingPrimaryKeyWarning):
            entity = builder.build(TableIdentifier(name="audit_log"))

        assert entity.primary_key == []
        assert entity.has_primary_key is False
        assert "audit_log" in builder.registry.tables()
        assert "has no primary key" in caplog.text

    def test_duplicate_moniker_raises(self):
        reader = FakeCatalogReader(tables={
            "order_item": (cols("id"), ["id"]),
            "order-item": (cols("id"), ["id"]),
        })
        builder = make_builder(reader)
        builder.build(TableIdentifier(name="order_item"))

        with pytest.raises(DuplicateMonikerError):
            builder.build(TableIdentifier(name="order-item"))
        assert builder.registry.get(TableIdentifier(name="order_item")).table.name == "order_item"

    def test_unknown_table_is_fatal(self):
        builder = make_builder(FakeCatalogReader())
        with pytest.raises(CatalogAccessError):
            builder.build(TableIdentifier(name="vanished"))

    def test_build_all_reports_skipped(self):
        reader = FakeCatalogReader(tables={
            "usr_accounts": (cols("id"), ["id"]),
            "usr_tmp": (cols("id"), ["id"]),
            "log_accounts": (cols("id"), ["id"]),
        })
        builder = make_builder(reader, include=re.compile("^usr_"), exclude=re.compile("_tmp$"))

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            built, skipped = builder.build_all(reader.list_tables())

        assert [e.moniker for e in built] == ["UsrAccounts"]
        assert [t.name for t in skipped] == ["usr_tmp", "log_accounts"]
