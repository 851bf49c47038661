"""Static registry of capability tags that entities can carry.

Capabilities are resolved by the downstream entity generator; the loader
only validates the names and attaches them in declared order.
"""

import logging
from typing import Iterable

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CORE_CAPABILITY = "core"


class CapabilityRegistry:
    """Known capability names and their descriptions."""

    def __init__(self):
        self._capabilities: dict[str, str] = {}

    def register(self, name: str, description: str = "") -> None:
        """Register a capability name.

        Args:
            name: Capability identifier
            description: Human readable description
        """
        if not name or not name.strip():
            raise ConfigurationError("Capability name must not be empty")
        self._capabilities[name] = description
        logger.debug(f"Registered capability: {name}")

    def is_registered(self, name: str) -> bool:
        return name in self._capabilities

    def describe(self, name: str) -> str:
        return self._capabilities.get(name, "")

    def resolve(self, names: Iterable[str]) -> list[str]:
        """Validate capability names, keeping order and dropping repeats.

        Raises:
            ConfigurationError: If a name is not registered
        """
        resolved: list[str] = []
        for name in names:
            if name not in self._capabilities:
                available = ", ".join(sorted(self._capabilities))
                raise ConfigurationError(
                    f"Unknown capability: {name}. Available: {available}"
                )
            if name not in resolved:
                resolved.append(name)
        return resolved

    def list_capabilities(self) -> list[str]:
        return sorted(self._capabilities)


def default_capability_registry() -> CapabilityRegistry:
    """Build a registry holding the core and vendor capabilities."""
    registry = CapabilityRegistry()
    registry.register(CORE_CAPABILITY, "Column accessors and primary key handling")
    registry.register("pk_auto_sqlite", "Auto-increment primary keys on SQLite")
    registry.register("pk_auto_pg", "Sequence-backed primary keys on PostgreSQL")
    registry.register("pk_auto_mysql", "AUTO_INCREMENT primary keys on MySQL")
    registry.register("pk_auto_mssql", "IDENTITY primary keys on SQL Server")
    registry.register("pk_auto", "Generic auto-increment primary key retrieval")
    registry.register("inflate_column", "Column value inflation/deflation hooks")
    registry.register("timestamps", "Automatic created/updated timestamp columns")
    registry.register("serializable", "Dict/JSON serialization of rows")
    return registry
