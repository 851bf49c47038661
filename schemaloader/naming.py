"""Naming engine: entity monikers and relation accessor names."""

import re
from typing import Optional

import inflect

from .models.catalog import TableIdentifier


_SEGMENT_SPLIT = re.compile(r"[\W_]+")


class NamingEngine:
    """Derives monikers from table names and relation names from nouns.

    Pluralization goes through `inflect`, a port of Lingua::EN::Inflect.
    Names `inflect` can singularize (``orders``, ``customers``) are taken
    as already plural and kept. It is still a heuristic: irregular nouns
    and singular words that merely look plural (``status``) can come out
    wrong. Supply an override for any noun whose generated name matters;
    overrides always win.
    """

    def __init__(
        self,
        inflection_overrides: Optional[dict[str, str]] = None,
        qualify_with_schema: bool = False,
    ):
        """Initialize the naming engine.

        Args:
            inflection_overrides: Raw relation name -> relation name to use
            qualify_with_schema: Prefix monikers with the schema name
        """
        self.qualify_with_schema = qualify_with_schema
        self.inflection_overrides = {
            raw.lower(): override
            for raw, override in (inflection_overrides or {}).items()
        }
        self._inflector = inflect.engine()

    def moniker_for(self, schema: Optional[str], table: str) -> str:
        """Make a moniker from a (possibly schema-qualified) table name.

        Args:
            schema: Schema name, or None
            table: Local table name

        Returns:
            Capitalized, concatenated identifier, e.g. ``order_items`` -> ``OrderItems``
        """
        moniker = "".join(
            segment.capitalize()
            for segment in _SEGMENT_SPLIT.split(table.lower())
            if segment
        )
        if schema and self.qualify_with_schema:
            moniker = schema.lower().capitalize() + moniker
        return moniker

    def moniker_for_table(self, table: TableIdentifier) -> str:
        return self.moniker_for(table.schema, table.name)

    def relation_name_for(self, raw_name: str) -> str:
        """Inflect a relationship name into its plural form.

        Args:
            raw_name: Raw relation name, usually a lower-cased table name

        Returns:
            The override if one is configured, the name itself if it is
            already plural, else the pluralized name
        """
        override = self.inflection_overrides.get(raw_name.lower())
        if override is not None:
            return override
        if self._inflector.singular_noun(raw_name):
            return raw_name
        return self._inflector.plural(raw_name)
