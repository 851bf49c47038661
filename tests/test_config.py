"""Tests for configuration management."""

import os
import re
from pathlib import Path

import pytest
from pydantic import ValidationError
from schemaloader.config import AppConfig, DatabaseConfig, LoaderConfig, OutputConfig


class TestDatabaseConfig:
    """Tests for DatabaseConfig."""

    def test_postgresql_connection_string(self):
        config = DatabaseConfig(db_type="postgresql", host="db", database="shop", user="app", password="pw")
        assert config.connection_string == "postgresql+psycopg2://app:pw@db:5432/shop"

    def test_mysql_default_port(self):
        config = DatabaseConfig(db_type="mysql", database="shop", user="root", password="")
        assert config.connection_string == "mysql+pymysql://root:@localhost:3306/shop"

    def test_sqlserver_driver(self):
        config = DatabaseConfig(db_type="sqlserver", port=1444, database="shop", user="sa", password="pw")
        assert config.connection_string == (
            "mssql+pyodbc://sa:pw@localhost:1444/shop?driver=ODBC+Driver+17+for+SQL+Server"
        )

    def test_sqlite(self):
        assert DatabaseConfig(db_type="sqlite", database="shop.db").connection_string == "sqlite:///shop.db"
        assert DatabaseConfig(db_type="sqlite").connection_string == "sqlite://"

    def test_url_wins(self):
        config = DatabaseConfig(db_type="postgresql", url="sqlite:///other.db", host="ignored")
        assert config.connection_string == "sqlite:///other.db"

    def test_generic_requires_url(self):
        with pytest.raises(ValueError):
            DatabaseConfig(db_type="generic").connection_string

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DB_DB_TYPE", "mysql")
        monkeypatch.setenv("DB_PORT", "3307")
        config = DatabaseConfig()
        assert config.db_type == "mysql"
        assert config.port == 3307


class TestLoaderConfig:
    """Tests for LoaderConfig."""

    def test_defaults(self):
        config = LoaderConfig()
        assert config.table_include.pattern == ".*"
        assert config.table_exclude is None
        assert config.infer_relationships is True
        assert config.qualify_monikers_with_schema is False
        assert config.vendor_capabilities_enabled is True

    def test_patterns_are_compiled(self):
        config = LoaderConfig(table_include="^usr_", table_exclude="_tmp$")
        assert isinstance(config.table_include, re.Pattern)
        assert config.table_include.search("usr_accounts")
        assert config.table_exclude.search("usr_tmp")

    def test_empty_patterns(self):
        config = LoaderConfig(table_include="", table_exclude="")
        assert config.table_include.pattern == ".*"
        assert config.table_exclude is None

    def test_invalid_pattern(self):
        with pytest.raises(ValidationError):
            LoaderConfig(table_include="usr_(")

    def test_single_capability_becomes_list(self):
        config = LoaderConfig(additional_capabilities="timestamps", post_core_capabilities=None)
        assert config.additional_capabilities == ["timestamps"]
        assert config.post_core_capabilities == []

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOADER_SCHEMA_NAME", "sales")
        monkeypatch.setenv("LOADER_INFLECTION_OVERRIDES", '{"person": "persons"}')
        monkeypatch.setenv("LOADER_INFER_RELATIONSHIPS", "false")
        config = LoaderConfig()
        assert config.schema_name == "sales"
        assert config.inflection_overrides == {"person": "persons"}
        assert config.infer_relationships is False


class TestOutputConfig:
    """Tests for OutputConfig."""

    def test_ensure_output_dir(self, tmp_path):
        config = OutputConfig(output_dir=tmp_path / "reports" / "nested")
        config.ensure_output_dir()
        assert config.output_dir.is_dir()


class TestAppConfig:
    """Tests for AppConfig."""

    def test_from_args_drops_none(self, monkeypatch):
        monkeypatch.setenv("LOADER_SCHEMA_NAME", "from_env")
        config = AppConfig.from_args(
            db_type="sqlite",
            database="shop.db",
            output_dir="out",
            schema_name=None,
            table_exclude="_tmp$",
            infer_relationships=False,
        )
        assert config.database.connection_string == "sqlite:///shop.db"
        assert config.loader.schema_name == "from_env"
        assert config.loader.table_exclude.pattern == "_tmp$"
        assert config.loader.infer_relationships is False
        assert config.output.output_dir == Path("out")

    def test_from_env_file(self, tmp_path):
        env_file = tmp_path / "test.env"
        env_file.write_text("LOADER_TABLE_INCLUDE=^usr_\nOUTPUT_GENERATE_JSON=true\n")

        try:
            config = AppConfig.from_env(str(env_file))
        finally:
            # load_dotenv writes straight into os.environ
            os.environ.pop("LOADER_TABLE_INCLUDE", None)
            os.environ.pop("OUTPUT_GENERATE_JSON", None)

        assert config.loader.table_include.pattern == "^usr_"
        assert config.output.generate_json is True
