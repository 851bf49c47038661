"""Exception and warning types raised by the schema loader."""

from typing import Optional


class SchemaLoaderError(Exception):
    """Base class for all schema loader errors."""


class ConfigurationError(SchemaLoaderError):
    """Raised when the loader configuration cannot be used."""


class CatalogAccessError(SchemaLoaderError):
    """Fatal catalog failure: lost connection, missing table, driver error."""

    def __init__(self, message: str, table: Optional[str] = None):
        self.table = table
        if table:
            message = f"{message} (table: {table})"
        super().__init__(message)


class DuplicateMonikerError(SchemaLoaderError):
    """Two distinct tables produced the same moniker."""

    def __init__(self, moniker: str, existing_table: str, new_table: str):
        self.moniker = moniker
        self.existing_table = existing_table
        self.new_table = new_table
        super().__init__(
            f"Moniker '{moniker}' for table '{new_table}' is already "
            f"registered for table '{existing_table}'"
        )


class RelationshipInferenceFailure(SchemaLoaderError):
    """A single relationship pair could not be declared."""

    def __init__(self, constraint_name: str, reason: str):
        self.constraint_name = constraint_name
        self.reason = reason
        super().__init__(f"Constraint '{constraint_name}': {reason}")


class MissingPrimaryKeyWarning(UserWarning):
    """A table has no primary key; its entity is still created."""
