"""
Hierarchy descriptions for display consumers.

Builds a structured view of an entity's ancestry:
- one node per ancestor (label, declared parents, whether it is defined)
- inherited fields and sub-entities with the ancestor that first declares them

Used by hierarchy views and by "preview before creating" flows, where an
entity that does not exist yet is described from a proposed parent list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Sequence, Tuple

from .entity import SchemaEntity
from .inheritance import InheritanceResolver


@dataclass(frozen=True)
class HierarchyNode:
    """One entity in a described hierarchy."""

    name: str
    label: str
    parents: Tuple[str, ...] = ()
    known: bool = True

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "label": self.label,
            "parents": list(self.parents),
            "known": self.known,
        }


@dataclass(frozen=True)
class InheritedItem:
    """A field or sub-entity and the ancestor it comes from.

    Attributes:
        name: Field or sub-entity name
        source: First ancestor, in C3 order, that declares the name
        required: Whether ``source`` declares it required
    """

    name: str
    source: str
    required: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "source": self.source, "required": self.required}


@dataclass(frozen=True)
class HierarchyDescription:
    root: str
    ancestors: Tuple[str, ...] = ()
    nodes: Mapping[str, HierarchyNode] = field(default_factory=dict)
    inherited_fields: Tuple[InheritedItem, ...] = ()
    inherited_sub_entities: Tuple[InheritedItem, ...] = ()

    def to_dict(self) -> dict:
        return {
            "root": self.root,
            "ancestors": list(self.ancestors),
            "nodes": {name: node.to_dict() for name, node in self.nodes.items()},
            "inherited_fields": [i.to_dict() for i in self.inherited_fields],
            "inherited_sub_entities": [i.to_dict() for i in self.inherited_sub_entities],
        }


def _collect(
    ancestors: Sequence[str],
    resolver: InheritanceResolver,
    required_attr: str,
    optional_attr: str,
) -> Tuple[InheritedItem, ...]:
    items: Dict[str, InheritedItem] = {}
    for ancestor in ancestors:
        entity = resolver.get_entity(ancestor)
        if entity is None:
            continue
        for name in getattr(entity, required_attr):
            if name not in items:
                items[name] = InheritedItem(name, ancestor, True)
        for name in getattr(entity, optional_attr):
            if name not in items:
                items[name] = InheritedItem(name, ancestor, False)
    return tuple(items.values())


def describe_hierarchy(resolver: InheritanceResolver, name: str) -> HierarchyDescription:
    """Describe the ancestry of an entity.

    Args:
        resolver: Resolver over the entity map
        name: Entity to describe

    Returns:
        HierarchyDescription; empty nodes and items if the entity is unknown

    Raises:
        InheritanceError: If the entity's ancestry cannot be linearized
    """
    if resolver.get_entity(name) is None:
        return HierarchyDescription(root=name)

    ancestors = resolver.get_ancestors(name)
    nodes: Dict[str, HierarchyNode] = {}
    for ancestor in ancestors:
        entity = resolver.get_entity(ancestor)
        if entity is None:
            nodes[ancestor] = HierarchyNode(ancestor, ancestor, (), known=False)
        else:
            nodes[ancestor] = HierarchyNode(ancestor, entity.label, entity.parents)

    return HierarchyDescription(
        root=name,
        ancestors=tuple(ancestors),
        nodes=nodes,
        inherited_fields=_collect(ancestors, resolver, "required_fields", "optional_fields"),
        inherited_sub_entities=_collect(
            ancestors, resolver, "required_sub_entities", "optional_sub_entities"
        ),
    )


def describe_virtual_hierarchy(
    entity_map: Mapping[str, SchemaEntity],
    name: str,
    parents: Sequence[str],
) -> HierarchyDescription:
    """Describe an entity that is not defined yet, from proposed parents.

    The proposed entity shadows any existing entity of the same name.

    Raises:
        EntityDefinitionError: If the name or parent list is invalid
        InheritanceError: If the proposed parents create a cycle
    """
    proposed = SchemaEntity(name=name, parents=tuple(parents))
    preview_map = dict(entity_map)
    preview_map[proposed.name] = proposed
    return describe_hierarchy(InheritanceResolver(preview_map), proposed.name)
