"""
Entity catalog for the schema system.

The EntityCatalog is the loader-facing registry that turns raw definitions
into the name to entity map the resolvers consume. It provides:
- Registration of entities (validated at construction)
- Lookup by name
- Catalog fingerprinting for change detection
- Freeze mechanism to prevent modification once resolution starts
- Whole-catalog validation (unknown parents, cycles, inconsistent orderings)

Invariants:
    - Catalog is mutable while loading, frozen before serving
    - Once frozen, no new entities can be registered
    - Entity names are unique
    - Fingerprint changes when any definition changes

How to change safely:
    - Register all entities before calling freeze()
    - Build resolvers via resolver(); each gets its own map snapshot
    - Keep unknown-parent strictness here, never in InheritanceResolver

Example:
    >>> catalog = EntityCatalog()
    >>> catalog.register_dict({"name": "Person", "fields": {"required": ["FullName"]}})
    >>> catalog.freeze()
    'sha256:...'
    >>> catalog.resolver().get_ancestors("Person")
    ['Person']
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Any, Dict, Iterator, Mapping, Optional

from ..config import ValidationConfig
from ..errors import CatalogFrozenError, DuplicateEntityError
from .entity import SchemaEntity
from .inheritance import InheritanceResolver

logger = logging.getLogger(__name__)


class EntityCatalog:
    """Registry of all schema entity definitions.

    Thread-safety:
        - Registration is thread-safe (uses internal lock)
        - Lookups after freeze are lock-free
        - Freeze is atomic and irreversible

    Attributes:
        frozen: Whether the catalog is frozen (immutable)
        fingerprint: SHA-256 hash of the catalog (computed on freeze)
    """

    def __init__(self, validation: Optional[ValidationConfig] = None) -> None:
        """Initialize an empty, mutable catalog.

        Args:
            validation: Validation settings (defaults to environment)
        """
        self._entities: Dict[str, SchemaEntity] = {}
        self._frozen = False
        self._fingerprint: Optional[str] = None
        self._lock = threading.Lock()
        self._validation = validation or ValidationConfig.from_env()

    @property
    def frozen(self) -> bool:
        """Whether the catalog is frozen."""
        return self._frozen

    @property
    def fingerprint(self) -> Optional[str]:
        """Catalog fingerprint (available after freeze)."""
        return self._fingerprint

    def register(self, entity: SchemaEntity) -> None:
        """Register an entity definition.

        Args:
            entity: The entity to register

        Raises:
            CatalogFrozenError: If catalog is frozen
            DuplicateEntityError: If the name is already registered
        """
        with self._lock:
            if self._frozen:
                raise CatalogFrozenError(
                    f"Cannot register entity '{entity.name}': catalog is frozen"
                )
            if entity.name in self._entities:
                raise DuplicateEntityError(entity.name)

            self._entities[entity.name] = entity
            logger.debug(f"Registered entity: {entity.name} (parents={list(entity.parents)})")

    def register_dict(self, data: Mapping[str, Any], name: Optional[str] = None) -> SchemaEntity:
        """Build an entity from raw data and register it.

        Raises:
            EntityDefinitionError: If the data is malformed
            CatalogFrozenError: If catalog is frozen
            DuplicateEntityError: If the name is already registered
        """
        entity = SchemaEntity.from_dict(data, name=name)
        self.register(entity)
        return entity

    def get(self, name: str) -> Optional[SchemaEntity]:
        """Get an entity by name, or None if unknown."""
        return self._entities.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def entities(self) -> Iterator[SchemaEntity]:
        """Iterate over all registered entities."""
        yield from self._entities.values()

    def as_map(self) -> Dict[str, SchemaEntity]:
        """Get a snapshot of the name to entity map."""
        return dict(self._entities)

    def resolver(self) -> InheritanceResolver:
        """Create an InheritanceResolver over a snapshot of this catalog."""
        return InheritanceResolver(self.as_map())

    def freeze(self) -> str:
        """Freeze the catalog and compute its fingerprint.

        Returns:
            Catalog fingerprint string

        Raises:
            CatalogFrozenError: If already frozen
        """
        with self._lock:
            if self._frozen:
                raise CatalogFrozenError("Catalog is already frozen")

            self._fingerprint = self._compute_fingerprint()
            self._frozen = True
            logger.info(
                f"Entity catalog frozen with {len(self._entities)} entities, "
                f"fingerprint={self._fingerprint}"
            )
            return self._fingerprint

    def _compute_fingerprint(self) -> str:
        """Compute SHA-256 fingerprint of the catalog.

        Returns:
            Fingerprint string in format 'sha256:<hash>'
        """
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return "sha256:" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def to_dict(self) -> dict:
        """Convert catalog to dictionary representation, sorted by name."""
        return {
            "entities": [self._entities[name].to_dict() for name in sorted(self._entities)],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        validation: Optional[ValidationConfig] = None,
    ) -> EntityCatalog:
        """Create catalog from dictionary representation.

        Accepts either ``{"entities": [...]}`` or ``{"entities": {name: {...}}}``.

        Returns:
            New EntityCatalog with entities registered (not frozen)
        """
        catalog = cls(validation=validation)
        entities = data.get("entities") or []
        if isinstance(entities, Mapping):
            for name, entity_data in entities.items():
                catalog.register_dict(entity_data, name=name)
        else:
            for entity_data in entities:
                catalog.register_dict(entity_data)
        return catalog

    @classmethod
    def from_json(cls, json_str: str, validation: Optional[ValidationConfig] = None) -> EntityCatalog:
        return cls.from_dict(json.loads(json_str), validation=validation)

    def validate_all(self, strict_parents: Optional[bool] = None) -> list[str]:
        """Validate all registered entities for consistency.

        Args:
            strict_parents: Report unknown parents as errors. Defaults to
                ``ValidationConfig.unknown_parents_are_errors``.

        Returns:
            List of validation errors (empty if valid)
        """
        if strict_parents is None:
            strict_parents = self._validation.unknown_parents_are_errors

        errors = []
        for entity in self._entities.values():
            for parent in entity.parents:
                if parent in self._entities:
                    continue
                message = f"Entity '{entity.name}' references unknown parent '{parent}'"
                if strict_parents:
                    errors.append(message)
                else:
                    logger.warning(message)

        errors.extend(self.resolver().validate_inheritance())
        return errors
