"""
Composition of several entities onto one target.

The MultiEntityResolver resolves each requested entity through an
InheritanceResolver and merges the effective definitions into a ResolvedSet.

Key behaviors:
    - Shared names appear once, attributed to every contributing input
    - Required promotion: a name required by any input is required in the
      result, whatever order the inputs come in
    - Ordering: first seen across inputs, ancestor-accumulation order within each
    - Resolving a single entity is not special-cased

Example:
    >>> composer = MultiEntityResolver(InheritanceResolver(entity_map))
    >>> result = composer.resolve(["Employee", "Volunteer"])
    >>> result.get_field_sources("FullName")
    ['Employee', 'Volunteer']
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .inheritance import InheritanceResolver
from .resolved import ResolvedSet

logger = logging.getLogger(__name__)


class _NamespaceAccumulator:
    """Collects required/optional names and their sources for one namespace."""

    def __init__(self) -> None:
        self.required: Dict[str, None] = {}
        self.optional: Dict[str, None] = {}
        self.sources: Dict[str, List[str]] = {}

    def add(self, source: str, required: Iterable[str], optional: Iterable[str]) -> None:
        for name in required:
            self.required.setdefault(name)
            self.sources.setdefault(name, []).append(source)
        for name in optional:
            if name not in self.required:
                self.optional.setdefault(name)
            self.sources.setdefault(name, []).append(source)

    def finish(self) -> Tuple[List[str], List[str], Dict[str, List[str]]]:
        """Apply required promotion and dedupe sources.

        Returns:
            Tuple of (required, optional, sources)
        """
        optional = [n for n in self.optional if n not in self.required]
        sources = {n: list(dict.fromkeys(s)) for n, s in self.sources.items()}
        return list(self.required), optional, sources


class MultiEntityResolver:
    """Resolves fields and sub-entities across multiple entities.

    Example:
        >>> composer = MultiEntityResolver(resolver)
        >>> composer.resolve(["P1", "P2"]).get_required_fields()
        ['Shared']
    """

    def __init__(self, inheritance_resolver: InheritanceResolver) -> None:
        self._inheritance = inheritance_resolver

    @property
    def inheritance_resolver(self) -> InheritanceResolver:
        return self._inheritance

    def resolve(self, names: Sequence[str]) -> ResolvedSet:
        """Resolve one or more entities into a single ResolvedSet.

        Args:
            names: Entity names, in the order attribution should record them

        Returns:
            ResolvedSet; empty when ``names`` is empty

        Raises:
            InheritanceError: If any entity's ancestry cannot be linearized
        """
        names = list(names)
        if not names:
            return ResolvedSet.empty()

        fields = _NamespaceAccumulator()
        sub_entities = _NamespaceAccumulator()

        for name in names:
            effective = self._inheritance.get_effective(name)
            fields.add(name, effective.required_fields, effective.optional_fields)
            sub_entities.add(
                name, effective.required_sub_entities, effective.optional_sub_entities
            )

        required_fields, optional_fields, field_sources = fields.finish()
        required_subs, optional_subs, sub_sources = sub_entities.finish()

        logger.debug(
            f"Resolved {len(names)} entities: {len(required_fields)} required, "
            f"{len(optional_fields)} optional fields"
        )

        return ResolvedSet(
            required_fields=tuple(required_fields),
            optional_fields=tuple(optional_fields),
            field_sources=field_sources,
            required_sub_entities=tuple(required_subs),
            optional_sub_entities=tuple(optional_subs),
            sub_entity_sources=sub_sources,
            input_names=tuple(names),
        )
