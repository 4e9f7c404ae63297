"""
Schema module for the entity catalog.

This module provides the inheritance and composition core, including:
- Entity definitions (SchemaEntity, DisplayConfig, FormConfig, SectionDef)
- C3 inheritance resolution (InheritanceResolver)
- Multi-entity composition (MultiEntityResolver, ResolvedSet)
- Catalog registry and whole-catalog validation (EntityCatalog)
- Hierarchy descriptions for display consumers

Invariants:
    - Entities are immutable; merges produce new entities
    - Entities reference each other by name only
    - Unknown parents resolve as empty leaves in the core
    - Ancestor chains are memoized per resolver, never globally

How to change safely:
    - Build a new resolver whenever the entity map changes
    - Keep unknown-parent strictness in EntityCatalog.validate_all()
"""

from .catalog import EntityCatalog
from .composition import MultiEntityResolver
from .entity import (
    DisplayConfig,
    FormConfig,
    SchemaEntity,
    SectionConfig,
    SectionDef,
    merge_sections,
    normalize_names,
    validate_entity_name,
)
from .hierarchy import (
    HierarchyDescription,
    HierarchyNode,
    InheritedItem,
    describe_hierarchy,
    describe_virtual_hierarchy,
)
from .inheritance import InheritanceResolver
from .resolved import ResolvedSet

__all__ = [
    # Entities
    "SchemaEntity",
    "SectionDef",
    "SectionConfig",
    "DisplayConfig",
    "FormConfig",
    "merge_sections",
    "normalize_names",
    "validate_entity_name",
    # Resolution
    "InheritanceResolver",
    "MultiEntityResolver",
    "ResolvedSet",
    # Catalog
    "EntityCatalog",
    # Hierarchy
    "HierarchyDescription",
    "HierarchyNode",
    "InheritedItem",
    "describe_hierarchy",
    "describe_virtual_hierarchy",
]
