"""
Error types for the schema catalog.

This module defines all exception types raised by the catalog:
- SchemaCatalogError: Base exception
- EntityDefinitionError: Malformed entity data (construction-time)
- InheritanceError: Parent graph cannot be linearized (resolution-time)
- CatalogError: Registration / freeze misuse

Invariants:
    - All errors inherit from SchemaCatalogError
    - Construction errors are also ValueErrors
    - Graph errors are also RuntimeErrors
    - Errors include context for debugging
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class SchemaCatalogError(Exception):
    """Base exception for all schema catalog errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "SCHEMA_CATALOG_ERROR"
        self.details = details or {}


class EntityDefinitionError(SchemaCatalogError, ValueError):
    """Entity definition is malformed.

    Raised when:
    - Name is empty or contains structural delimiter characters
    - Entity lists itself as a parent
    - A name is both required and optional in the same namespace
    - A configuration block has the wrong shape
    """

    def __init__(
        self,
        message: str,
        entity_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="ENTITY_DEFINITION",
            details={"entity_name": entity_name},
        )
        self.entity_name = entity_name


class InheritanceError(SchemaCatalogError, RuntimeError):
    """The parent graph of an entity cannot be linearized."""


class CircularInheritanceError(InheritanceError):
    """An entity is (transitively) its own ancestor.

    Attributes:
        cycle: The visiting path that closed the cycle, first entry repeated last
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle: List[str] = list(cycle)
        super().__init__(
            "Circular inheritance detected: " + " -> ".join(self.cycle),
            code="CIRCULAR_INHERITANCE",
            details={"cycle": self.cycle},
        )


class InconsistentPrecedenceError(InheritanceError):
    """Parent orderings across the hierarchy contradict each other.

    Attributes:
        entity_name: Entity whose linearization failed
        sequences: The remaining merge sequences when no valid head existed
    """

    def __init__(
        self,
        entity_name: str,
        sequences: Sequence[Sequence[str]],
    ) -> None:
        self.entity_name = entity_name
        self.sequences = [list(s) for s in sequences]
        super().__init__(
            f"C3 merge failed for '{entity_name}': inconsistent parent ordering "
            f"(remaining: {self.sequences})",
            code="INCONSISTENT_PRECEDENCE",
            details={"entity_name": entity_name, "sequences": self.sequences},
        )


class CatalogError(SchemaCatalogError):
    """Base for catalog registration errors."""


class CatalogFrozenError(CatalogError):
    """Raised when attempting to modify a frozen catalog."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CATALOG_FROZEN")


class DuplicateEntityError(CatalogError):
    """Raised when attempting to register an entity name twice."""

    def __init__(self, entity_name: str) -> None:
        super().__init__(
            f"Entity '{entity_name}' already registered",
            code="DUPLICATE_ENTITY",
            details={"entity_name": entity_name},
        )
        self.entity_name = entity_name
