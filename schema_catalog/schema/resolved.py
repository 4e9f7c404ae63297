"""
Resolved set of fields and sub-entities across several entities.

A ResolvedSet is the output of MultiEntityResolver.resolve(): the merged,
deduplicated required/optional names of every input entity, with the input
entities that contributed each name.

Invariants:
    - Immutable once constructed; accessors return copies
    - Required and optional sets are disjoint per namespace (promotion done)
    - Names keep first-seen order across inputs
    - Attribution lists hold each input name at most once
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Tuple


def _freeze_sources(sources: Mapping[str, Sequence[str]]) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({name: tuple(values) for name, values in sources.items()})


@dataclass(frozen=True)
class ResolvedSet:
    """Merged fields and sub-entities of one or more entities.

    Attributes:
        required_fields: Required field names
        optional_fields: Optional field names, excluding any required one
        field_sources: Field name to contributing input names
        required_sub_entities: Required sub-entity names
        optional_sub_entities: Optional sub-entity names, excluding required
        sub_entity_sources: Sub-entity name to contributing input names
        input_names: The entity names that were resolved, in input order
    """

    required_fields: Tuple[str, ...] = ()
    optional_fields: Tuple[str, ...] = ()
    field_sources: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    required_sub_entities: Tuple[str, ...] = ()
    optional_sub_entities: Tuple[str, ...] = ()
    sub_entity_sources: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    input_names: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("required_fields", "optional_fields", "required_sub_entities",
                     "optional_sub_entities", "input_names"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, "field_sources", _freeze_sources(self.field_sources))
        object.__setattr__(self, "sub_entity_sources", _freeze_sources(self.sub_entity_sources))

    @classmethod
    def empty(cls) -> ResolvedSet:
        """A resolved set of zero entities."""
        return cls()

    # -------------------- Fields --------------------

    def get_required_fields(self) -> List[str]:
        return list(self.required_fields)

    def get_optional_fields(self) -> List[str]:
        """Optional fields, already stripped of fields required elsewhere."""
        return list(self.optional_fields)

    def get_all_fields(self) -> List[str]:
        """Required then optional fields, deduplicated."""
        return list(dict.fromkeys(self.required_fields + self.optional_fields))

    def get_field_sources(self, name: str) -> List[str]:
        """Input entities contributing a field (empty if unknown)."""
        return list(self.field_sources.get(name, ()))

    def is_shared_field(self, name: str) -> bool:
        """Whether a field is contributed by two or more input entities."""
        return len(self.field_sources.get(name, ())) > 1

    # -------------------- Sub-entities --------------------

    def get_required_sub_entities(self) -> List[str]:
        return list(self.required_sub_entities)

    def get_optional_sub_entities(self) -> List[str]:
        return list(self.optional_sub_entities)

    def get_all_sub_entities(self) -> List[str]:
        return list(dict.fromkeys(self.required_sub_entities + self.optional_sub_entities))

    def get_sub_entity_sources(self, name: str) -> List[str]:
        return list(self.sub_entity_sources.get(name, ()))

    def is_shared_sub_entity(self, name: str) -> bool:
        return len(self.sub_entity_sources.get(name, ())) > 1

    # -------------------- Metadata --------------------

    def get_input_names(self) -> List[str]:
        return list(self.input_names)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation for downstream consumers."""
        return {
            "input_names": list(self.input_names),
            "fields": {
                "required": list(self.required_fields),
                "optional": list(self.optional_fields),
                "sources": {k: list(v) for k, v in self.field_sources.items()},
            },
            "sub_entities": {
                "required": list(self.required_sub_entities),
                "optional": list(self.optional_sub_entities),
                "sources": {k: list(v) for k, v in self.sub_entity_sources.items()},
            },
        }
