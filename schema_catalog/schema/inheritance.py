"""
Inheritance resolution for schema entities.

The InheritanceResolver linearizes multiple inheritance with C3 and folds
an entity's ancestors into one effective entity.

C3 linearization guarantees:
    - the entity itself comes first
    - a parent always precedes its own ancestors (monotonicity)
    - declared parent order is preserved (local precedence)

Invariants:
    - The entity map is read-only for the resolver's lifetime
    - Unknown names are leaves: they linearize to themselves and resolve
      to an empty entity, never an error
    - Cycles and inconsistent orderings raise InheritanceError subclasses
    - Ancestor chains are memoized per resolver instance, never globally

How to change safely:
    - Build a new resolver whenever the entity map changes
    - Keep merge order most-specific-first; overrides depend on it

Example:
    >>> resolver = InheritanceResolver({
    ...     "Person": SchemaEntity(name="Person", required_fields=("FullName",)),
    ...     "Employee": SchemaEntity(name="Employee", parents=("Person",)),
    ... })
    >>> resolver.get_ancestors("Employee")
    ['Employee', 'Person']
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import (
    CircularInheritanceError,
    EntityDefinitionError,
    InconsistentPrecedenceError,
    InheritanceError,
)
from .entity import SchemaEntity

logger = logging.getLogger(__name__)


class InheritanceResolver:
    """Resolves ancestor chains and effective definitions of entities.

    Attributes:
        entity_map: Name to SchemaEntity mapping being resolved (a private copy)

    Example:
        >>> resolver = InheritanceResolver(entity_map)
        >>> resolver.get_ancestors("PhDStudent")
        ['PhDStudent', 'GraduateStudent', 'Person']
        >>> resolver.get_effective("PhDStudent").required_fields
        ('FullName', 'Advisor')
    """

    def __init__(self, entity_map: Mapping[str, SchemaEntity]) -> None:
        """Initialize the resolver over a name to entity mapping.

        Raises:
            TypeError: If any value is not a SchemaEntity
            EntityDefinitionError: If a key differs from its entity's name
        """
        for name, entity in entity_map.items():
            if not isinstance(entity, SchemaEntity):
                raise TypeError(
                    f"Entity map value for '{name}' must be a SchemaEntity, "
                    f"got {type(entity).__name__}"
                )
            if entity.name != name:
                raise EntityDefinitionError(
                    f"Entity map key '{name}' does not match entity name '{entity.name}'",
                    entity_name=entity.name,
                )
        self._entities: Dict[str, SchemaEntity] = dict(entity_map)
        self._ancestor_cache: Dict[str, Tuple[str, ...]] = {}

    @property
    def entity_map(self) -> Dict[str, SchemaEntity]:
        return dict(self._entities)

    def names(self) -> Iterator[str]:
        """Iterate over the names of all known entities."""
        yield from self._entities

    def get_entity(self, name: str) -> Optional[SchemaEntity]:
        """Get the declared (unmerged) entity, or None if unknown."""
        return self._entities.get(name)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_ancestors(self, name: str) -> List[str]:
        """Get the C3 linearization of an entity.

        The entity itself is first, followed by its ancestors from most to
        least specific.

        Args:
            name: Entity name

        Returns:
            Ordered list of names; ``[name]`` for unknown entities

        Raises:
            CircularInheritanceError: If the entity is its own ancestor
            InconsistentPrecedenceError: If parent orderings contradict
        """
        cached = self._ancestor_cache.get(name)
        if cached is not None:
            return list(cached)

        if name not in self._entities:
            return [name]

        ancestors = tuple(self._linearize(name, ()))
        self._ancestor_cache[name] = ancestors
        logger.debug(f"Linearized '{name}': {' -> '.join(ancestors)}")
        return list(ancestors)

    def get_effective(self, name: str) -> SchemaEntity:
        """Get the fully merged definition of an entity.

        Starting from the entity itself, every ancestor in C3 order is folded
        in with ``merge_with_parent``. Earlier entries win header and section
        overrides; required names anywhere in the chain stay required.

        Args:
            name: Entity name

        Returns:
            Effective SchemaEntity; an empty entity for unknown names

        Raises:
            CircularInheritanceError: If the entity is its own ancestor
            InconsistentPrecedenceError: If parent orderings contradict
        """
        if name not in self._entities:
            return SchemaEntity(name=name)

        ancestors = self.get_ancestors(name)
        effective = self._entities[ancestors[0]]
        for ancestor in ancestors[1:]:
            effective = effective.merge_with_parent(self._entity_or_leaf(ancestor))
        return effective

    # Category-oriented alias
    get_effective_category = get_effective

    def validate_inheritance(self) -> List[str]:
        """Validate every entity's ancestry.

        Returns:
            List of error messages (empty if every entity linearizes)
        """
        errors: List[str] = []
        for name in self._entities:
            try:
                self.get_ancestors(name)
            except InheritanceError as e:
                errors.append(e.message)
        return errors

    def is_ancestor_of(self, ancestor: str, name: str) -> bool:
        """Whether ``ancestor`` appears in the ancestor chain of ``name``.

        An entity counts as its own ancestor, matching ``get_ancestors``.
        """
        return ancestor in self.get_ancestors(name)

    # ------------------------------------------------------------------
    # C3 linearization
    # ------------------------------------------------------------------

    def _entity_or_leaf(self, name: str) -> SchemaEntity:
        entity = self._entities.get(name)
        return entity if entity is not None else SchemaEntity(name=name)

    def _linearize(self, name: str, visiting: Tuple[str, ...]) -> List[str]:
        """Compute the C3 linearization of ``name``.

        Args:
            name: Entity to linearize
            visiting: Names currently being expanded, outermost first
        """
        if name in visiting:
            start = visiting.index(name)
            raise CircularInheritanceError(visiting[start:] + (name,))

        cached = self._ancestor_cache.get(name)
        if cached is not None:
            return list(cached)

        entity = self._entities.get(name)
        if entity is None or not entity.parents:
            return [name]

        visiting = visiting + (name,)
        sequences = [self._linearize(parent, visiting) for parent in entity.parents]
        sequences.append(list(entity.parents))

        return [name] + _c3_merge(name, sequences)


def _c3_merge(name: str, sequences: Sequence[List[str]]) -> List[str]:
    """Merge linearizations with the C3 rule.

    Repeatedly take the first sequence head that is absent from the tail of
    every sequence, then drop it from the heads.

    Raises:
        InconsistentPrecedenceError: If no head qualifies
    """
    pending = [list(seq) for seq in sequences if seq]
    output: List[str] = []

    while pending:
        candidate = _find_head(pending)
        if candidate is None:
            raise InconsistentPrecedenceError(name, pending)

        output.append(candidate)
        for seq in pending:
            if seq[0] == candidate:
                del seq[0]
        pending = [seq for seq in pending if seq]

    return output


def _find_head(sequences: Sequence[List[str]]) -> Optional[str]:
    for seq in sequences:
        head = seq[0]
        if not any(head in other[1:] for other in sequences):
            return head
    return None
