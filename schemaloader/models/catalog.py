"""Normalized catalog records shared by every catalog adapter."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TableIdentifier(BaseModel):
    """Schema-qualified table name with case-insensitive equality."""
    model_config = ConfigDict(frozen=True)

    schema: Optional[str] = Field(None, description="Schema name")
    name: str = Field(..., description="Local table name")

    @property
    def qualified_name(self) -> str:
        """Get `schema.name`, or just `name` when no schema is set."""
        if self.schema:
            return f"{self.schema}.{self.name}"
        return self.name

    @property
    def normalized(self) -> tuple[str, str]:
        return ((self.schema or "").lower(), self.name.lower())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableIdentifier):
            return NotImplemented
        return self.normalized == other.normalized

    def __hash__(self) -> int:
        return hash(self.normalized)

    def __str__(self) -> str:
        return self.qualified_name


class ColumnDefinition(BaseModel):
    """A column as reported by the catalog."""
    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="Data type descriptor from the catalog")
    nullable: bool = Field(True, description="Whether the column allows NULL")
    default: Optional[str] = Field(None, description="Default value expression")
    ordinal_position: int = Field(0, description="Column position in the table")


class ForeignKeyConstraint(BaseModel):
    """A foreign key, possibly one row of a composite key.

    Adapters may return one record per catalog row; records sharing a
    constraint name are merged by the relationship inferrer.
    """
    name: str = Field(..., description="Constraint identifier, lower-cased")
    child_table: TableIdentifier = Field(..., description="Referencing table")
    parent_table: TableIdentifier = Field(..., description="Referenced table")
    column_pairs: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Ordered (child column, parent column) pairs",
    )

    @property
    def child_columns(self) -> list[str]:
        return [child for child, _ in self.column_pairs]

    @property
    def parent_columns(self) -> list[str]:
        return [parent for _, parent in self.column_pairs]

    @property
    def is_composite(self) -> bool:
        return len(self.column_pairs) > 1
