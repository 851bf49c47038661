"""Relationship inference from foreign key metadata."""

import logging
from typing import Iterable, Optional

import networkx as nx
from pydantic import BaseModel, Field

from .adapters.base import CatalogReader
from .exceptions import RelationshipInferenceFailure
from .models.catalog import ForeignKeyConstraint, TableIdentifier
from .models.entity import (
    EntityRegistry,
    RelationshipDeclaration,
    RelationshipKind,
)
from .naming import NamingEngine

logger = logging.getLogger(__name__)


class DeclaredPair(BaseModel):
    """A successfully declared belongs_to / has_many pair."""
    constraint_name: str
    child_moniker: str
    parent_moniker: str
    belongs_to: str
    has_many: str


class InferenceFailureRecord(BaseModel):
    """A relationship that was skipped because it could not be declared."""
    constraint_name: str
    table: str
    reason: str


class InferenceResult(BaseModel):
    """Outcome of one inference pass."""
    declared: list[DeclaredPair] = Field(default_factory=list)
    failures: list[InferenceFailureRecord] = Field(default_factory=list)
    skipped: int = Field(0, description="Constraints whose other side is not registered")

    @property
    def success_count(self) -> int:
        return len(self.declared)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def group_constraints(
    constraints: Iterable[ForeignKeyConstraint],
) -> tuple[dict[str, ForeignKeyConstraint], dict[str, str]]:
    """Merge constraint rows sharing an identifier into composite keys.

    Returns:
        (constraints by identifier in first-seen order, malformed identifier -> reason)
    """
    grouped: dict[str, ForeignKeyConstraint] = {}
    malformed: dict[str, str] = {}

    for constraint in constraints:
        relid = constraint.name.lower()
        current = grouped.get(relid)
        if current is None:
            grouped[relid] = constraint.model_copy(
                update={"name": relid, "column_pairs": list(constraint.column_pairs)}
            )
            continue
        if current.parent_table != constraint.parent_table:
            malformed[relid] = (
                f"rows reference both {current.parent_table} and {constraint.parent_table}"
            )
            continue
        for pair in constraint.column_pairs:
            if pair not in current.column_pairs:
                current.column_pairs.append(pair)

    return grouped, malformed


class RelationshipInferrer:
    """Declares a belongs_to / has_many pair for every foreign key."""

    def __init__(
        self,
        reader: CatalogReader,
        registry: EntityRegistry,
        naming: NamingEngine,
        debug: bool = False,
    ):
        self.reader = reader
        self.registry = registry
        self.naming = naming
        self.debug = debug

    def infer_all(self, tables: Optional[Iterable[TableIdentifier]] = None) -> InferenceResult:
        """Infer relationships for registered tables.

        Args:
            tables: Tables to process; defaults to the whole registry in
                registration order

        Returns:
            InferenceResult with declared pairs, failures and skip count

        Raises:
            CatalogAccessError: If foreign key metadata cannot be read
        """
        result = InferenceResult()
        if tables is None:
            tables = [entity.table for entity in self.registry.entities()]

        for table in tables:
            if table not in self.registry:
                continue
            grouped, malformed = group_constraints(self.reader.foreign_key_constraints(table))

            for relid, constraint in grouped.items():
                if relid in malformed:
                    self._record_failure(result, table, RelationshipInferenceFailure(relid, malformed[relid]))
                    continue
                try:
                    pair = self._make_pair(constraint)
                except (RelationshipInferenceFailure, ValueError) as e:
                    failure = e if isinstance(e, RelationshipInferenceFailure) else RelationshipInferenceFailure(relid, str(e))
                    self._record_failure(result, table, failure)
                    continue
                if pair is None:
                    result.skipped += 1
                else:
                    result.declared.append(pair)

        logger.info(
            f"Declared {result.success_count} relationship pairs "
            f"({result.failure_count} failed, {result.skipped} unreachable)"
        )
        return result

    def _record_failure(self, result: InferenceResult, table: TableIdentifier, failure: RelationshipInferenceFailure) -> None:
        logger.warning(f"Relationship inference failed for {table.qualified_name}: {failure}")
        result.failures.append(InferenceFailureRecord(
            constraint_name=failure.constraint_name,
            table=table.qualified_name,
            reason=failure.reason,
        ))

    def _make_pair(self, constraint: ForeignKeyConstraint) -> Optional[DeclaredPair]:
        """Declare both sides of one grouped constraint.

        Returns:
            The declared pair, or None if either table is not registered
        """
        child = self.registry.get(constraint.child_table)
        parent = self.registry.get(constraint.parent_table)
        if child is None or parent is None:
            logger.debug(
                f"Skipping {constraint.name}: {constraint.child_table} -> "
                f"{constraint.parent_table} is not fully registered"
            )
            return None

        if not constraint.column_pairs:
            raise RelationshipInferenceFailure(constraint.name, "constraint has no column pairs")
        for child_col, parent_col in constraint.column_pairs:
            if not child_col or not parent_col:
                raise RelationshipInferenceFailure(constraint.name, "constraint has an unnamed column")

        # Single-column keys take the foreign key column's name
        if constraint.is_composite:
            belongs_name = parent.table.name.lower()
        else:
            belongs_name = constraint.column_pairs[0][0]
        has_many_name = self.naming.relation_name_for(child.table.name.lower())

        cond = {parent_col: child_col for child_col, parent_col in constraint.column_pairs}
        rev_cond = {child_col: parent_col for child_col, parent_col in constraint.column_pairs}

        belongs_to = RelationshipDeclaration(
            name=belongs_name,
            kind=RelationshipKind.BELONGS_TO,
            target_moniker=parent.moniker,
            target_table=parent.table,
            condition=cond,
            constraint_name=constraint.name,
        )
        has_many = RelationshipDeclaration(
            name=has_many_name,
            kind=RelationshipKind.HAS_MANY,
            target_moniker=child.moniker,
            target_table=child.table,
            condition=rev_cond,
            constraint_name=constraint.name,
        )

        self.registry.declare_pair(child, belongs_to, parent, has_many)

        if self.debug:
            logger.info("# Belongs_to relationship")
            logger.info(f"{child.moniker}->{belongs_to.describe()};")
            logger.info("# Has_many relationship")
            logger.info(f"{parent.moniker}->{has_many.describe()};")

        return DeclaredPair(
            constraint_name=constraint.name,
            child_moniker=child.moniker,
            parent_moniker=parent.moniker,
            belongs_to=belongs_name,
            has_many=has_many_name,
        )


def build_relationship_graph(registry: EntityRegistry) -> nx.DiGraph:
    """Build a graph of entities with an edge per belongs_to declaration.

    Edges point from child moniker to parent moniker. Several foreign keys
    between the same two entities collapse into one edge; the last one
    declared supplies the edge attributes.
    """
    graph = nx.DiGraph()
    for entity in registry.entities():
        graph.add_node(entity.moniker, table=entity.table.qualified_name)

    for entity in registry.entities():
        for rel in entity.relationships:
            if rel.kind != RelationshipKind.BELONGS_TO:
                continue
            graph.add_edge(
                entity.moniker,
                rel.target_moniker,
                relation=rel.name,
                condition=dict(rel.condition),
                constraint=rel.constraint_name,
            )
    return graph


def get_join_path(graph: nx.DiGraph, from_moniker: str, to_moniker: str) -> Optional[list[tuple[str, str, str]]]:
    """Find the shortest chain of belongs_to hops between two entities.

    Returns:
        List of (from_moniker, relation_name, to_moniker) tuples or None
    """
    try:
        path = nx.shortest_path(graph, from_moniker, to_moniker)
    except (nx.NetworkXNoPath, nx.NodeNotFound):
        return None

    if len(path) < 2:
        return None

    hops = []
    for i in range(len(path) - 1):
        edge_data = graph.get_edge_data(path[i], path[i + 1])
        hops.append((path[i], edge_data["relation"], path[i + 1]))
    return hops


def get_relationship_stats(graph: nx.DiGraph) -> dict:
    """Get statistics about the relationship graph."""
    return {
        "total_entities": graph.number_of_nodes(),
        "total_relationships": graph.number_of_edges(),
        "isolated_entities": len(list(nx.isolates(graph))),
        "connected_components": nx.number_weakly_connected_components(graph) if graph.number_of_nodes() else 0,
    }
