"""Data models for the schema loader."""

from .catalog import (
    TableIdentifier,
    ColumnDefinition,
    ForeignKeyConstraint,
)

from .entity import (
    RelationshipKind,
    RelationshipDeclaration,
    Entity,
    EntityRegistry,
)

__all__ = [
    # Catalog models
    "TableIdentifier",
    "ColumnDefinition",
    "ForeignKeyConstraint",
    # Entity models
    "RelationshipKind",
    "RelationshipDeclaration",
    "Entity",
    "EntityRegistry",
]
