"""Schema loader: drives catalog reading, entity building and inference."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .adapters import get_reader
from .adapters.base import CatalogReader
from .capabilities import CORE_CAPABILITY, CapabilityRegistry, default_capability_registry
from .config import DatabaseConfig, LoaderConfig
from .entity_builder import EntityBuilder
from .models.catalog import TableIdentifier
from .models.entity import EntityRegistry
from .naming import NamingEngine
from .relationship_inferrer import InferenceResult, RelationshipInferrer

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Everything one loader run produced."""
    registry: EntityRegistry
    tables_seen: list[TableIdentifier] = field(default_factory=list)
    filtered_tables: list[TableIdentifier] = field(default_factory=list)
    inference: Optional[InferenceResult] = None

    @property
    def entity_count(self) -> int:
        return len(self.registry)

    @property
    def relationship_count(self) -> int:
        return self.registry.relationship_count


class SchemaLoader:
    """Runs one introspection pass over a catalog.

    Configuration is validated in the constructor, before any catalog
    access. Each loader owns its own registry; run separate loaders with
    separate readers if several catalogs are loaded side by side.
    """

    def __init__(
        self,
        reader: CatalogReader,
        config: Optional[LoaderConfig] = None,
        capability_registry: Optional[CapabilityRegistry] = None,
    ):
        """Initialize the loader.

        Args:
            reader: Catalog reader (not yet connected)
            config: Loader configuration
            capability_registry: Known capability names

        Raises:
            ConfigurationError: If a configured capability is unknown
        """
        self.reader = reader
        self.config = config or LoaderConfig()
        self.capability_registry = capability_registry or default_capability_registry()
        self.capabilities = self._resolve_capabilities()

        self.naming = NamingEngine(
            inflection_overrides=self.config.inflection_overrides,
            qualify_with_schema=self.config.qualify_monikers_with_schema,
        )
        self.registry = EntityRegistry(qualify_with_schema=self.config.qualify_monikers_with_schema)

    def _resolve_capabilities(self) -> list[str]:
        """Order: pre-core, core, vendor-provided, additional, post-core."""
        ordered = list(self.config.pre_core_capabilities)
        ordered.append(CORE_CAPABILITY)
        if self.config.vendor_capabilities_enabled:
            ordered.extend(self.reader.capabilities)
        ordered.extend(self.config.additional_capabilities)
        ordered.extend(self.config.post_core_capabilities)
        return self.capability_registry.resolve(ordered)

    def load(self) -> LoadResult:
        """Introspect the catalog and build the entity registry.

        Raises:
            CatalogAccessError: On any connection-level or catalog failure
            DuplicateMonikerError: If two tables map to one moniker
        """
        debug = self.config.debug_logging
        result = LoadResult(registry=self.registry)

        self.reader.connect()
        if debug:
            logger.info("### START schema loader dump ###")
        try:
            tables = self.reader.list_tables(self.config.schema_name or None)
            result.tables_seen = tables

            builder = EntityBuilder(
                self.reader,
                self.registry,
                self.naming,
                include=self.config.table_include,
                exclude=self.config.table_exclude,
                capabilities=self.capabilities,
                debug=debug,
            )
            _built, result.filtered_tables = builder.build_all(tables)

            if self.config.infer_relationships:
                inferrer = RelationshipInferrer(self.reader, self.registry, self.naming, debug=debug)
                result.inference = inferrer.infer_all()
        finally:
            if debug:
                logger.info("### END schema loader dump ###")
            self.reader.disconnect()

        logger.info(
            f"Loaded {result.entity_count} entities with "
            f"{result.relationship_count} relationship declarations"
        )
        return result


def load_schema(
    db_config: DatabaseConfig,
    loader_config: Optional[LoaderConfig] = None,
) -> LoadResult:
    """Convenience function to load a schema from connection settings.

    Args:
        db_config: Database configuration
        loader_config: Loader configuration (optional)

    Returns:
        LoadResult with the populated entity registry
    """
    loader_config = loader_config or LoaderConfig()
    reader = get_reader(
        db_config.db_type,
        db_config.connection_string,
        schema_name=loader_config.schema_name or None,
    )
    try:
        return SchemaLoader(reader, loader_config).load()
    finally:
        reader.engine.dispose()
