"""Entity models and the entity registry built during a loader run."""

from typing import Any, Iterator, Optional
from pydantic import BaseModel, Field
from enum import Enum

from ..exceptions import DuplicateMonikerError, RelationshipInferenceFailure
from .catalog import ColumnDefinition, TableIdentifier


class RelationshipKind(str, Enum):
    """Direction of a relationship declaration."""
    BELONGS_TO = "belongs_to"   # child -> parent lookup
    HAS_MANY = "has_many"       # parent -> children collection


class RelationshipDeclaration(BaseModel):
    """One side of a relationship pair, attached to an entity."""
    name: str = Field(..., description="Relation accessor name")
    kind: RelationshipKind = Field(..., description="belongs_to or has_many")
    target_moniker: str = Field(..., description="Moniker of the related entity")
    target_table: TableIdentifier = Field(..., description="Table of the related entity")
    condition: dict[str, str] = Field(
        default_factory=dict,
        description="Join condition: related entity column -> own column",
    )
    constraint_name: str = Field(..., description="Foreign key constraint this came from")

    def describe(self) -> str:
        """Render the declaration the way the debug trace prints it."""
        cond = ", ".join(f"{k} => {v}" for k, v in self.condition.items())
        return f"{self.kind.value}( '{self.name}' => '{self.target_moniker}', {{ {cond} }} )"


class Entity(BaseModel):
    """The generated object-model unit for one table."""
    moniker: str = Field(..., description="Unique generated identifier")
    table: TableIdentifier = Field(..., description="Underlying table")
    columns: list[ColumnDefinition] = Field(default_factory=list, description="Ordered columns")
    primary_key: list[str] = Field(default_factory=list, description="Primary key columns")
    capabilities: list[str] = Field(default_factory=list, description="Ordered capability tags")
    relationships: list[RelationshipDeclaration] = Field(
        default_factory=list,
        description="Attached relationship declarations",
    )

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    @property
    def has_primary_key(self) -> bool:
        return bool(self.primary_key)

    def get_column(self, name: str) -> Optional[ColumnDefinition]:
        """Get column by name (case-insensitive)."""
        for col in self.columns:
            if col.name.lower() == name.lower():
                return col
        return None

    def get_relationship(self, name: str) -> Optional[RelationshipDeclaration]:
        for rel in self.relationships:
            if rel.name == name:
                return rel
        return None

    def has_relationship(self, name: str) -> bool:
        return self.get_relationship(name) is not None

    def add_relationship(self, declaration: RelationshipDeclaration) -> None:
        """Attach a declaration, refusing to shadow an existing relation."""
        if self.has_relationship(declaration.name):
            raise RelationshipInferenceFailure(
                declaration.constraint_name,
                f"relation '{declaration.name}' already exists on {self.moniker}",
            )
        self.relationships.append(declaration)

    def remove_relationship(self, declaration: RelationshipDeclaration) -> None:
        self.relationships = [r for r in self.relationships if r is not declaration]


class EntityRegistry:
    """Authoritative mapping of table keys to entities and monikers.

    Keys are lower-cased table names, or lower-cased qualified names when
    schema qualification is enabled. Registration order is preserved.
    """

    def __init__(self, qualify_with_schema: bool = False):
        self.qualify_with_schema = qualify_with_schema
        self.classes: dict[str, Entity] = {}
        self.monikers: dict[str, str] = {}
        self._tables_by_moniker: dict[str, str] = {}

    def key_for(self, table: TableIdentifier) -> str:
        """Get the registry key for a table."""
        if self.qualify_with_schema and table.schema:
            return table.qualified_name.lower()
        return table.name.lower()

    def register(self, entity: Entity) -> Entity:
        """Register an entity.

        Raises:
            DuplicateMonikerError: If the moniker already names another table
        """
        key = self.key_for(entity.table)
        owner = self._tables_by_moniker.get(entity.moniker)
        if owner is not None and owner != key:
            raise DuplicateMonikerError(entity.moniker, owner, key)
        if key in self.classes:
            existing = self.classes[key]
            raise DuplicateMonikerError(existing.moniker, key, entity.table.qualified_name)

        self.classes[key] = entity
        self.monikers[key] = entity.moniker
        self._tables_by_moniker[entity.moniker] = key
        return entity

    def __contains__(self, table: TableIdentifier) -> bool:
        return self.key_for(table) in self.classes

    def __len__(self) -> int:
        return len(self.classes)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.classes.values())

    def get(self, table: TableIdentifier) -> Optional[Entity]:
        return self.classes.get(self.key_for(table))

    def get_by_moniker(self, moniker: str) -> Optional[Entity]:
        key = self._tables_by_moniker.get(moniker)
        return self.classes.get(key) if key else None

    def moniker_for_table(self, table: TableIdentifier) -> Optional[str]:
        return self.monikers.get(self.key_for(table))

    def tables(self) -> list[str]:
        """Get table keys in registration order."""
        return list(self.classes)

    def sorted_tables(self) -> list[str]:
        return sorted(self.classes)

    def entities(self) -> list[Entity]:
        return list(self.classes.values())

    def declare_pair(
        self,
        child: Entity,
        belongs_to: RelationshipDeclaration,
        parent: Entity,
        has_many: RelationshipDeclaration,
    ) -> None:
        """Attach both sides of a relationship or neither."""
        child.add_relationship(belongs_to)
        try:
            parent.add_relationship(has_many)
        except Exception:
            child.remove_relationship(belongs_to)
            raise

    @property
    def relationship_count(self) -> int:
        return sum(len(e.relationships) for e in self.classes.values())

    def to_dict(self) -> dict[str, Any]:
        """Export the registry as a plain mapping keyed by table key."""
        return {
            key: entity.model_dump(mode="json")
            for key, entity in self.classes.items()
        }
