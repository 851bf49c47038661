"""Entity builder: turns filtered catalog tables into registered entities."""

import logging
import re
import warnings
from typing import Iterable, Optional

from .adapters.base import CatalogReader
from .capabilities import CORE_CAPABILITY
from .exceptions import MissingPrimaryKeyWarning
from .models.catalog import TableIdentifier
from .models.entity import Entity, EntityRegistry
from .naming import NamingEngine

logger = logging.getLogger(__name__)


class EntityBuilder:
    """Builds one entity per accepted table and registers it."""

    def __init__(
        self,
        reader: CatalogReader,
        registry: EntityRegistry,
        naming: NamingEngine,
        include: Optional[re.Pattern] = None,
        exclude: Optional[re.Pattern] = None,
        capabilities: Optional[list[str]] = None,
        debug: bool = False,
    ):
        """Initialize the entity builder.

        Args:
            reader: Catalog reader for column and primary key metadata
            registry: Registry receiving the entities
            naming: Naming engine producing monikers
            include: Tables must match this pattern
            exclude: Tables must not match this pattern
            capabilities: Ordered, already-resolved capability tags for every entity
            debug: Trace each generated declaration
        """
        self.reader = reader
        self.registry = registry
        self.naming = naming
        self.include = include or re.compile(".*")
        self.exclude = exclude
        self.capabilities = list(capabilities) if capabilities is not None else [CORE_CAPABILITY]
        self.debug = debug

    def accepts(self, table: TableIdentifier) -> bool:
        """Apply the inclusion and exclusion patterns; exclusion wins."""
        candidates = {table.qualified_name, table.name}
        if not any(self.include.search(name) for name in candidates):
            return False
        if self.exclude is not None and any(self.exclude.search(name) for name in candidates):
            return False
        return True

    def build(self, table: TableIdentifier) -> Optional[Entity]:
        """Build and register the entity for a table.

        Returns:
            The entity, or None if the table was filtered out

        Raises:
            CatalogAccessError: If the table's columns cannot be read
            DuplicateMonikerError: If another table already owns the moniker
        """
        if not self.accepts(table):
            logger.debug(f"Skipping filtered table {table.qualified_name}")
            return None

        existing = self.registry.get(table)
        if existing is not None and existing.table == table:
            return existing

        columns, primary_key = self.reader.columns_and_primary_key(table)
        moniker = self.naming.moniker_for(table.schema, table.name)

        entity = Entity(
            moniker=moniker,
            table=table,
            columns=columns,
            primary_key=primary_key,
            capabilities=list(self.capabilities),
        )
        self.registry.register(entity)

        if not primary_key:
            message = f"{table.qualified_name} has no primary key"
            logger.warning(message)
            warnings.warn(message, MissingPrimaryKeyWarning, stacklevel=2)

        if self.debug:
            self._trace(entity)

        return entity

    def build_all(self, tables: Iterable[TableIdentifier]) -> tuple[list[Entity], list[TableIdentifier]]:
        """Build entities for many tables.

        Returns:
            (built entities, tables rejected by the filters)
        """
        built, skipped = [], []
        for table in tables:
            entity = self.build(table)
            if entity is None:
                skipped.append(table)
            else:
                built.append(entity)
        logger.info(f"Built {len(built)} entities, skipped {len(skipped)} tables")
        return built, skipped

    def _trace(self, entity: Entity) -> None:
        key = self.registry.key_for(entity.table)
        logger.info(f'# Initializing table "{key}" as "{entity.moniker}"')
        logger.info(f"{entity.moniker}->table('{key}');")
        logger.info(f"{entity.moniker}->add_columns('" + "', '".join(entity.column_names) + "')")
        if entity.primary_key:
            logger.info(f"{entity.moniker}->set_primary_key('" + "', '".join(entity.primary_key) + "')")
        if entity.capabilities:
            logger.info(f"{entity.moniker}->capabilities('" + "', '".join(entity.capabilities) + "')")
