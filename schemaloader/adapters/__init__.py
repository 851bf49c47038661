"""Catalog readers for multi-database support."""

import logging
from typing import Optional, Type, Union

from sqlalchemy.engine import Engine

from ..exceptions import ConfigurationError
from .base import CatalogReader
from .information_schema import (
    InformationSchemaReader,
    MySQLCatalogReader,
    PostgresCatalogReader,
    SQLServerCatalogReader,
)
from .inspector import InspectorCatalogReader
from .sqlite import SQLiteCatalogReader

logger = logging.getLogger(__name__)

READER_REGISTRY: dict[str, Type[CatalogReader]] = {
    "sqlite": SQLiteCatalogReader,
    "postgresql": PostgresCatalogReader,
    "postgres": PostgresCatalogReader,  # Alias
    "mysql": MySQLCatalogReader,
    "mariadb": MySQLCatalogReader,  # Alias
    "sqlserver": SQLServerCatalogReader,
    "mssql": SQLServerCatalogReader,  # Alias
    "oracle": InspectorCatalogReader,
    "generic": InspectorCatalogReader,
}


def get_reader(
    db_type: str,
    engine: Union[Engine, str],
    schema_name: Optional[str] = None,
) -> CatalogReader:
    """Factory function to get the appropriate catalog reader.

    Raises:
        ConfigurationError: If the database type is not supported
    """
    reader_class = READER_REGISTRY.get(db_type.lower().strip())
    if not reader_class:
        available = ", ".join(sorted(READER_REGISTRY))
        raise ConfigurationError(f"Unsupported database type: {db_type}. Available: {available}")

    logger.debug(f"Creating {reader_class.__name__} for {db_type}")
    return reader_class(engine, schema_name=schema_name)


def register_reader(name: str, reader_class: Type[CatalogReader]) -> None:
    """Register a custom catalog reader."""
    if not issubclass(reader_class, CatalogReader):
        raise TypeError(f"Reader class must inherit from CatalogReader, got {reader_class}")
    READER_REGISTRY[name.lower()] = reader_class
    logger.info(f"Registered custom catalog reader: {name}")


__all__ = [
    "CatalogReader",
    "InformationSchemaReader",
    "InspectorCatalogReader",
    "MySQLCatalogReader",
    "PostgresCatalogReader",
    "SQLiteCatalogReader",
    "SQLServerCatalogReader",
    "READER_REGISTRY",
    "get_reader",
    "register_reader",
]
