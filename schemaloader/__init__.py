"""Schema Loader - derive an entity model from a relational catalog.

Reads tables, columns, primary keys and foreign keys from a database
catalog and builds one entity per table, with belongs_to / has_many
relationship pairs inferred from the foreign keys.
"""

__version__ = "0.1.0"

from .exceptions import (
    SchemaLoaderError,
    ConfigurationError,
    CatalogAccessError,
    DuplicateMonikerError,
    RelationshipInferenceFailure,
    MissingPrimaryKeyWarning,
)
from .models import (
    TableIdentifier,
    ColumnDefinition,
    ForeignKeyConstraint,
    RelationshipKind,
    RelationshipDeclaration,
    Entity,
    EntityRegistry,
)
from .config import DatabaseConfig, LoaderConfig, OutputConfig, AppConfig
from .naming import NamingEngine
from .adapters import CatalogReader, get_reader, register_reader
from .entity_builder import EntityBuilder
from .relationship_inferrer import RelationshipInferrer, InferenceResult
from .loader import SchemaLoader, LoadResult, load_schema

__all__ = [
    # Errors
    "SchemaLoaderError",
    "ConfigurationError",
    "CatalogAccessError",
    "DuplicateMonikerError",
    "RelationshipInferenceFailure",
    "MissingPrimaryKeyWarning",
    # Models
    "TableIdentifier",
    "ColumnDefinition",
    "ForeignKeyConstraint",
    "RelationshipKind",
    "RelationshipDeclaration",
    "Entity",
    "EntityRegistry",
    # Configuration
    "DatabaseConfig",
    "LoaderConfig",
    "OutputConfig",
    "AppConfig",
    # Components
    "NamingEngine",
    "CatalogReader",
    "get_reader",
    "register_reader",
    "EntityBuilder",
    "RelationshipInferrer",
    "InferenceResult",
    "SchemaLoader",
    "LoadResult",
    "load_schema",
]
